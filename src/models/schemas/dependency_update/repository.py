"""
Repository Schemas

Remote state as seen through the hosting API: the repository handle,
branch references and raw file contents.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class RepositoryHandle(BaseModel):
    """Identifies the target repository for the lifetime of a run."""

    model_config = ConfigDict(frozen=True)

    full_name: str = Field(
        ...,
        description="Repository name in owner/repo format",
        pattern=r"^[^/]+/[^/]+$",
    )

    @field_validator("full_name")
    @classmethod
    def validate_repo_name_format(cls, v: str) -> str:
        parts = v.split("/")
        if not all(part.strip() for part in parts):
            raise ValueError("Owner and repository name cannot be empty")
        return v

    def __str__(self) -> str:
        return self.full_name


class BranchRef(BaseModel):
    """Branch name plus the commit it points at."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    sha: str = Field(..., min_length=1, description="Head commit SHA")


class RemoteFile(BaseModel):
    """File contents as returned by the contents API."""

    model_config = ConfigDict(frozen=True)

    path: str
    sha: str = Field(..., description="Blob SHA used as the revision marker")
    content: str = Field(..., description="Transport-encoded content")
    encoding: Optional[str] = Field("base64", description="Transport encoding of content")
