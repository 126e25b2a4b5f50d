"""Migration engine - main entry point for migration operations."""

from datetime import datetime
from pathlib import Path
from typing import AsyncIterator, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from ..api.client import BitbucketClient, GitHubClient
from ..config.config import Config
from ..git.transport import GitTransport, RepositoryTransport
from ..models.repository import RepositorySummary
from .builder import ContextBuilder
from .flow import apply_flow_control
from .pipeline import StagePipeline
from .source import BitbucketRepositorySource
from .steps import PublishRepositoryStep


class MigratedRepository(BaseModel):
    """A repository that went through every pipeline step."""

    slug: str = Field(..., description='Bitbucket repository slug')
    url: str = Field(..., description='GitHub repository URL')
    archived: bool = Field(default=False, description='Repository was archived')


class PlannedRepository(BaseModel):
    """What a dry run found out about a repository."""

    slug: str = Field(..., description='Bitbucket repository slug')
    private: bool = Field(..., description='Repository visibility')
    updated_days_ago: int = Field(..., description='Days since last update')
    archive: bool = Field(..., description='Repository would be archived')
    endpoint: str = Field(..., description='GitHub creation endpoint')


class MigrationSummary(BaseModel):
    """Summary of a migration run."""

    started_at: datetime = Field(..., description='Migration start time')
    completed_at: Optional[datetime] = Field(
        default=None, description='Migration completion time'
    )
    dry_run: bool = Field(default=False, description='Nothing was changed')
    migrated: List[MigratedRepository] = Field(default_factory=list)
    planned: List[PlannedRepository] = Field(default_factory=list)


class MigrationEngine:
    """Pulls repositories through flow control, context building and the pipeline.

    Repositories are processed one at a time. The first failure aborts the
    whole run; repositories after it are never attempted.
    """

    def __init__(
        self,
        config: Config,
        transport: Optional[RepositoryTransport] = None,
        source_client: Optional[BitbucketClient] = None,
        destination_client: Optional[GitHubClient] = None,
    ):
        """Initialize migration engine.

        Args:
            config: Migration configuration
            transport: Repository transport (git executable by default)
            source_client: Bitbucket client (built from config by default)
            destination_client: GitHub client (built from config by default)
        """
        self.config = config
        self.logger = logger.bind(component='MigrationEngine')

        self.source_client = source_client or BitbucketClient(config.source)
        self.destination_client = destination_client or GitHubClient(
            config.destination
        )
        self.transport = transport or GitTransport(timeout=config.git.timeout)

        self.source = BitbucketRepositorySource(
            self.source_client, config.source.workspace, config.migration.sort
        )
        self.builder = ContextBuilder(
            config, self.source_client, self.destination_client
        )
        self.pipeline = StagePipeline.default(config, self.transport)

    def repositories(
        self, delay: Optional[float] = None
    ) -> AsyncIterator[RepositorySummary]:
        """Repository stream after capping, exclusion and throttling."""
        migration = self.config.migration
        return apply_flow_control(
            self.source.iter_repositories(),
            max_items=migration.max_repositories,
            excluded=migration.excluded_repositories,
            delay=migration.delay_seconds if delay is None else delay,
        )

    async def migrate(self) -> MigrationSummary:
        """Migrate every repository of the workspace.

        Returns:
            Migration summary
        """
        summary = MigrationSummary(started_at=datetime.now())
        Path(self.config.git.repositories_dir).mkdir(parents=True, exist_ok=True)

        self.logger.info('Starting migrations')

        try:
            async for repository in self.repositories():
                context = self.builder.build(repository)
                result = await self.pipeline.run(context)

                result.logger.info(f'Repository migrated: {result.destination_url}')
                summary.migrated.append(
                    MigratedRepository(
                        slug=result.slug,
                        url=result.destination_url,
                        archived=result.should_be_archived,
                    )
                )

        except Exception as e:
            self.logger.error(f'Migration failed: {e}')
            raise
        finally:
            self.close()

        summary.completed_at = datetime.now()
        self.logger.info('All repositories migrated successfully')
        return summary

    async def dry_run(self) -> MigrationSummary:
        """List what a migration would do without changing anything.

        Returns:
            Migration summary (dry run results)
        """
        summary = MigrationSummary(started_at=datetime.now(), dry_run=True)
        publish = PublishRepositoryStep(self.config, self.transport)

        self.logger.info('Starting migration dry run')

        try:
            async for repository in self.repositories(delay=0):
                context = self.builder.build(repository)
                context.logger.info(
                    f'Would migrate repository (archive: {context.should_be_archived})'
                )
                summary.planned.append(
                    PlannedRepository(
                        slug=context.slug,
                        private=context.is_private,
                        updated_days_ago=context.updated_days_ago,
                        archive=context.should_be_archived,
                        endpoint=publish.create_endpoint(context),
                    )
                )

        except Exception as e:
            self.logger.error(f'Dry run failed: {e}')
            raise
        finally:
            self.close()

        summary.completed_at = datetime.now()
        self.logger.info('Dry run completed successfully')
        return summary

    def test_connectivity(self) -> None:
        """Test connectivity to Bitbucket and GitHub.

        Raises:
            ConnectionError: If connectivity test fails
        """
        self.logger.info('Testing connectivity to Bitbucket and GitHub')

        if not self.source_client.test_connection():
            raise ConnectionError('Cannot connect to Bitbucket')

        if not self.destination_client.test_connection():
            raise ConnectionError('Cannot connect to GitHub')

        self.logger.info('Connectivity tests passed')

    def close(self) -> None:
        """Close the API client sessions."""
        self.source_client.close()
        self.destination_client.close()
