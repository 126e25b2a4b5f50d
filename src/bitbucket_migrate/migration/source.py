"""Paginated Bitbucket repository listing."""

from typing import AsyncIterator
from urllib.parse import quote

from loguru import logger
from pydantic import ValidationError

from ..api.client import BitbucketClient
from ..api.exceptions import SchemaValidationError
from ..models.repository import RepositoryListing, RepositorySummary


class BitbucketRepositorySource:
    """Enumerates every repository of a Bitbucket workspace.

    Pages are requested in ascending order. Each page is fetched and
    validated as a whole, then its repositories are yielded before the
    next page is requested. Iteration stops at the first page without a
    ``next`` link. Every call to :meth:`iter_repositories` starts a fresh
    remote query.
    """

    def __init__(
        self, client: BitbucketClient, workspace: str, sort: str = '-updated_on'
    ):
        self.client = client
        self.workspace = workspace
        self.sort = sort
        self.logger = logger.bind(component='BitbucketRepositorySource')

    async def fetch_page(self, page: int) -> RepositoryListing:
        """Fetch and validate one listing page.

        Raises:
            SchemaValidationError: If the page does not match the listing schema
        """
        response = await self.client.get_async(
            f'repositories/{quote(self.workspace, safe="")}',
            params={'sort': self.sort, 'page': page},
        )

        try:
            return RepositoryListing.model_validate(response.data)
        except ValidationError as e:
            self.logger.error(f'Invalid repository listing on page {page}: {e}')
            raise SchemaValidationError(
                f'Invalid repository listing on page {page}',
                status_code=response.status_code,
                response_data=response.data,
            ) from e

    async def iter_repositories(self) -> AsyncIterator[RepositorySummary]:
        """Yield repositories of every page until the listing is exhausted."""
        page = 1

        while True:
            listing = await self.fetch_page(page)

            for repository in listing.values:
                yield repository

            if not listing.has_next:
                return

            page = listing.page + 1
            self.logger.debug(f'Fetching repo list page {page}')

    def __aiter__(self) -> AsyncIterator[RepositorySummary]:
        return self.iter_repositories()
