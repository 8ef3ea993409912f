"""
Tests for the duplicate proposal guard.
"""

import pytest

from src.exceptions.dependency_update_exceptions import DuplicateProposalError
from src.services.dependency_update.duplicate_guard import DuplicateGuard
from tests.doubles import InMemoryGateway

PREFIX = "update-deps-santari"


@pytest.mark.unit
@pytest.mark.parametrize(
    "branch_name, expected",
    [
        ("update-deps-santari-42", True),
        ("feature/update-deps-santari-1", True),
        ("update-deps-santari", True),
        ("update-deps", False),
        ("master", False),
    ],
)
def test_is_proposal_branch_matches_prefix_anywhere(branch_name, expected):
    guard = DuplicateGuard(InMemoryGateway(), PREFIX)

    assert guard.is_proposal_branch(branch_name) is expected


@pytest.mark.asyncio
async def test_passes_when_no_update_branch_exists(repository):
    gateway = InMemoryGateway(branches=["master", "develop"])
    guard = DuplicateGuard(gateway, PREFIX)

    await guard.check_no_active_proposal(repository)

    assert gateway.call_names == ["list_branches"]


@pytest.mark.asyncio
async def test_reports_every_active_update_branch(repository):
    gateway = InMemoryGateway(
        branches=["master", "update-deps-santari-7", "update-deps-santari-99"]
    )
    guard = DuplicateGuard(gateway, PREFIX)

    with pytest.raises(DuplicateProposalError) as exc_info:
        await guard.check_no_active_proposal(repository)

    assert exc_info.value.branch_names == ["update-deps-santari-7", "update-deps-santari-99"]
    assert exc_info.value.status_code == 409
    assert "owner/test-repo" in str(exc_info.value)


@pytest.mark.asyncio
async def test_find_active_proposals_returns_names(repository):
    gateway = InMemoryGateway(branches=["master", "update-deps-santari-3"])

    active = await DuplicateGuard(gateway, PREFIX).find_active_proposals(repository)

    assert active == ["update-deps-santari-3"]
