"""Bitbucket repository listing models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RepositorySummary(BaseModel):
    """Bitbucket repository as returned by the workspace listing."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    name: str = Field(..., description='Repository display name')
    slug: str = Field(..., description='URL-safe repository identifier')
    description: str = Field(..., description='Free-text description')
    is_private: bool = Field(..., description='Repository visibility')
    updated_on: datetime = Field(..., description='Last update timestamp')


class RepositoryListing(BaseModel):
    """One page of the Bitbucket repository listing."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    next: Optional[str] = Field(default=None, description='Next page URL')
    page: int = Field(..., description='Page number')
    values: List[RepositorySummary] = Field(..., description='Repositories on page')

    @property
    def has_next(self) -> bool:
        """Whether a further page exists."""
        return bool(self.next)
