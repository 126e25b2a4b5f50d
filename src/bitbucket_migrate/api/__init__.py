"""Hosting provider API clients."""

from .client import APIClient, APIResponse, BitbucketClient, GitHubClient
from .exceptions import (
    APIError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    SchemaValidationError,
)

__all__ = [
    'APIClient',
    'APIResponse',
    'BitbucketClient',
    'GitHubClient',
    'APIError',
    'AuthenticationError',
    'ForbiddenError',
    'NotFoundError',
    'RateLimitError',
    'SchemaValidationError',
]
