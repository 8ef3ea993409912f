"""
Manifest Schemas
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class ManifestSnapshot(BaseModel):
    """package.json as read from the main branch, with its revision marker."""

    model_config = ConfigDict(frozen=True)

    revision: str = Field(..., min_length=1, description="Blob SHA at read time")
    path: str = Field(..., min_length=1)
    data: Dict[str, Any] = Field(..., description="Parsed manifest")
    raw: str = Field(..., description="Decoded manifest text")
    scratch_path: Optional[str] = Field(
        None, description="Local copy handed to the resolver"
    )


class UpdateSet(BaseModel):
    """Resolver result: nothing to do, or an upgraded manifest and its next version."""

    model_config = ConfigDict(frozen=True)

    has_changes: bool = False
    upgraded: Optional[Dict[str, Any]] = None
    next_version: Optional[str] = None

    @classmethod
    def none(cls) -> "UpdateSet":
        return cls(has_changes=False)
