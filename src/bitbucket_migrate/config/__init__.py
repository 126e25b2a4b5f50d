"""Run configuration."""

from .config import (
    NO_TEAM,
    BitbucketConfig,
    Config,
    GitConfig,
    GitHubConfig,
    LoggingConfig,
    MigrationConfig,
)

__all__ = [
    'NO_TEAM',
    'BitbucketConfig',
    'Config',
    'GitConfig',
    'GitHubConfig',
    'LoggingConfig',
    'MigrationConfig',
]
