"""
Pull Request Schemas
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class PullRequestRequest(BaseModel):
    """Payload for opening the update pull request. Never mutated once built."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    body: str = ""
    head: str = Field(..., min_length=1, description="Source branch name")
    base: str = Field(..., min_length=1, description="Target branch name")


class PullRequest(BaseModel):
    """Pull request as created on the remote."""

    number: int = Field(..., ge=1)
    url: Optional[str] = Field(None, description="HTML URL of the pull request")
    head: str
    base: str
