from .dependency_update import (
    RepositoryHandle,
    BranchRef,
    RemoteFile,
    ManifestSnapshot,
    UpdateSet,
    PullRequestRequest,
    PullRequest,
    WorkflowState,
    StateTransition,
    UpdateOutcome,
    DependencyUpdateRequest,
    DependencyUpdateResult,
)

# Export all models
__all__ = [
    'RepositoryHandle',
    'BranchRef',
    'RemoteFile',
    'ManifestSnapshot',
    'UpdateSet',
    'PullRequestRequest',
    'PullRequest',
    'WorkflowState',
    'StateTransition',
    'UpdateOutcome',
    'DependencyUpdateRequest',
    'DependencyUpdateResult',
]
