"""Derives the per-repository migration context."""

import os
from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from ..api.client import BitbucketClient, GitHubClient
from ..config.config import Config
from ..models.context import MigrationContext
from ..models.repository import RepositorySummary
from ..utils.dates import calc_difference_in_days
from ..utils.text import slug_suffix


class ContextBuilder:
    """Builds a :class:`MigrationContext` from a listing entry.

    Building is deterministic for a given clock and touches neither the
    network nor the filesystem.
    """

    def __init__(
        self,
        config: Config,
        source_client: BitbucketClient,
        destination_client: GitHubClient,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.source_client = source_client
        self.destination_client = destination_client
        self.now = now or (lambda: datetime.now(timezone.utc))

    def build(self, repository: RepositorySummary) -> MigrationContext:
        updated_days_ago = calc_difference_in_days(repository.updated_on, self.now())

        return MigrationContext(
            **dict(repository),
            working_dir=os.path.join(self.config.git.repositories_dir, repository.slug),
            is_organization=self.config.destination.is_organization,
            updated_days_ago=updated_days_ago,
            should_be_archived=(
                updated_days_ago >= self.config.migration.archive_after_days
            ),
            slug_suffix=slug_suffix(repository.slug),
            source_client=self.source_client,
            destination_client=self.destination_client,
            logger=logger.bind(repository=repository.slug),
        )
