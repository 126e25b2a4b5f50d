"""GitHub response models."""

from pydantic import BaseModel, ConfigDict, Field


class GitHubRepository(BaseModel):
    """Repository returned by the GitHub creation endpoints."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    name: str = Field(..., description='Repository name')
    html_url: str = Field(..., description='Repository web URL')


class GitHubBranch(BaseModel):
    """Entry of the GitHub branch listing."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    name: str = Field(..., description='Branch name')
