"""
Dependency Update Workflow Schemas

States, outcome and Temporal workflow contracts for one update run.
"""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

from .proposal import PullRequest


class WorkflowState(str, Enum):
    """States of the update workflow. FAILED and DONE are terminal."""
    IDLE = "idle"
    GUARD_CHECKED = "guard_checked"
    MAIN_BRANCH_READ = "main_branch_read"
    MANIFEST_READ = "manifest_read"
    RESOLVED = "resolved"
    BRANCH_CREATED = "branch_created"
    MANIFEST_COMMITTED = "manifest_committed"
    PR_OPENED = "pr_opened"
    DONE = "done"
    FAILED = "failed"


class StateTransition(BaseModel):
    """One recorded arrow of the state machine."""

    state: WorkflowState
    detail: Optional[str] = None
    at: datetime


class UpdateOutcome(BaseModel):
    """Successful end of a run, with or without a proposal."""

    repository: str
    state: WorkflowState
    up_to_date: bool = Field(..., description="True when the resolver found nothing to update")
    branch_name: Optional[str] = None
    pull_request: Optional[PullRequest] = None
    next_version: Optional[str] = None
    transitions: List[StateTransition] = Field(default_factory=list)


class DependencyUpdateRequest(BaseModel):
    """Input contract for the Temporal dependency update workflow."""

    github_repo_name: str = Field(
        ...,
        description="Repository name in owner/repo format",
        pattern=r"^[^/]+/[^/]+$",
    )

    @field_validator("github_repo_name")
    @classmethod
    def validate_repo_name_format(cls, v: str) -> str:
        parts = v.split("/")
        if not all(part.strip() for part in parts):
            raise ValueError("Owner and repository name cannot be empty")
        return v


class DependencyUpdateResult(BaseModel):
    """Output contract for the Temporal dependency update workflow."""

    status: Literal["completed", "up_to_date", "duplicate", "failed"] = Field(
        ..., description="Final workflow status"
    )
    github_repo_name: str
    branch_name: Optional[str] = None
    pull_request_number: Optional[int] = Field(None, ge=1)
    pull_request_url: Optional[str] = None
    next_version: Optional[str] = None
    processing_duration_ms: Optional[int] = Field(
        None, description="Total processing time in milliseconds", ge=0
    )
    error_message: Optional[str] = Field(None, description="Error message if workflow failed")
    completed_at: datetime = Field(..., description="Workflow completion timestamp")
