"""Data models for Bitbucket repositories and migration state."""

from .repository import RepositoryListing, RepositorySummary
from .github import GitHubBranch, GitHubRepository
from .context import MigrationContext, PublishedMigrationContext

__all__ = [
    'RepositoryListing',
    'RepositorySummary',
    'GitHubBranch',
    'GitHubRepository',
    'MigrationContext',
    'PublishedMigrationContext',
]
