"""
Dependency Update Data Models

Pydantic schemas for the dependency update workflow.
"""

from .repository import RepositoryHandle, BranchRef, RemoteFile
from .manifest import ManifestSnapshot, UpdateSet
from .proposal import PullRequestRequest, PullRequest
from .update_workflow import (
    WorkflowState,
    StateTransition,
    UpdateOutcome,
    DependencyUpdateRequest,
    DependencyUpdateResult,
)

__all__ = [
    # Remote state
    "RepositoryHandle",
    "BranchRef",
    "RemoteFile",

    # Manifest
    "ManifestSnapshot",
    "UpdateSet",

    # Proposal
    "PullRequestRequest",
    "PullRequest",

    # Workflow
    "WorkflowState",
    "StateTransition",
    "UpdateOutcome",
    "DependencyUpdateRequest",
    "DependencyUpdateResult",
]
