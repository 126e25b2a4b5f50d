"""Per-repository migration context models."""

from typing import Any

from pydantic import ConfigDict, Field

from ..api.client import BitbucketClient, GitHubClient
from .repository import RepositorySummary


class MigrationContext(RepositorySummary):
    """Repository summary enriched with everything the pipeline derives.

    Contexts are frozen; later stages extend them into a new model rather
    than changing fields in place.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    working_dir: str = Field(..., description='Local working copy path')
    is_organization: bool = Field(..., description='Destination is an organization')
    updated_days_ago: int = Field(..., description='Days since last update')
    should_be_archived: bool = Field(..., description='Repository is stale')
    slug_suffix: str = Field(default='', description='Extension-like slug suffix')
    source_client: BitbucketClient = Field(..., description='Bitbucket API client')
    destination_client: GitHubClient = Field(..., description='GitHub API client')
    logger: Any = Field(..., description='Logger bound to this repository')

    def published(self, destination_url: str) -> 'PublishedMigrationContext':
        """Extend the context once the destination repository exists."""
        return PublishedMigrationContext(**dict(self), destination_url=destination_url)


class PublishedMigrationContext(MigrationContext):
    """Context of a repository that has been created and pushed on GitHub."""

    destination_url: str = Field(..., description='GitHub repository web URL')
