"""Protocol definition for the hosting operations the update workflow needs."""

from typing import List, Protocol

from src.models.schemas.dependency_update import (
    BranchRef,
    PullRequest,
    PullRequestRequest,
    RemoteFile,
    RepositoryHandle,
)


class RemoteRepositoryGateway(Protocol):
    """Opaque hosting API: branches, file contents and pull requests."""

    async def list_branches(self, repository: RepositoryHandle) -> List[BranchRef]:
        """Return every branch of the repository."""
        ...

    async def get_branch(self, repository: RepositoryHandle, branch_name: str) -> BranchRef:
        """Return the branch and its head commit SHA."""
        ...

    async def get_file(self, repository: RepositoryHandle, path: str, ref: str) -> RemoteFile:
        """Return transport-encoded file content plus its revision marker."""
        ...

    async def create_branch(
        self, repository: RepositoryHandle, branch_name: str, from_sha: str
    ) -> BranchRef:
        """Create a branch reference pointing at from_sha."""
        ...

    async def update_file(
        self,
        repository: RepositoryHandle,
        path: str,
        content: str,
        message: str,
        revision: str,
        branch: str,
    ) -> str:
        """Write content on branch if revision is still current; return the commit SHA."""
        ...

    async def open_pull_request(
        self, repository: RepositoryHandle, request: PullRequestRequest
    ) -> PullRequest:
        """Open a pull request from request.head into request.base."""
        ...
