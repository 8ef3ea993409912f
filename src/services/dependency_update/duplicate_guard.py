"""
Duplicate Proposal Guard

Best-effort check that no update branch from an earlier run is still around.
There is no server-side lock: two runs that both pass this check before either
creates its branch will both go on to open a proposal.
"""

from typing import List

from src.exceptions.dependency_update_exceptions import DuplicateProposalError
from src.models.schemas.dependency_update import RepositoryHandle
from src.services.github.protocols import RemoteRepositoryGateway


class DuplicateGuard:
    def __init__(self, gateway: RemoteRepositoryGateway, branch_prefix: str):
        self.gateway = gateway
        self.branch_prefix = branch_prefix

    def is_proposal_branch(self, branch_name: str) -> bool:
        return self.branch_prefix in branch_name

    async def find_active_proposals(self, repository: RepositoryHandle) -> List[str]:
        """Names of existing branches that follow the update branch naming convention."""
        branches = await self.gateway.list_branches(repository)
        return [branch.name for branch in branches if self.is_proposal_branch(branch.name)]

    async def check_no_active_proposal(self, repository: RepositoryHandle) -> None:
        """
        Raises:
            DuplicateProposalError: If an update branch already exists
        """
        active = await self.find_active_proposals(repository)
        if active:
            raise DuplicateProposalError(repository.full_name, active)
