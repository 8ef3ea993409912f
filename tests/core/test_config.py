"""Tests for credential and settings loading."""

import pytest

from src.core.config import MissingCredentialsError, Settings, require_github_key
from src.core.dependency_update_config import DependencyUpdateSettings, ProposalConfig


@pytest.mark.unit
def test_require_github_key_returns_token():
    assert require_github_key(Settings(GITHUB_KEY="ghp_test")) == "ghp_test"


@pytest.mark.unit
def test_require_github_key_rejects_empty_token():
    with pytest.raises(MissingCredentialsError, match="GITHUB_KEY"):
        require_github_key(Settings(GITHUB_KEY=""))


@pytest.mark.unit
def test_proposal_defaults():
    proposal = ProposalConfig()

    assert proposal.branch_prefix == "update-deps-santari"
    assert proposal.main_branch == "master"
    assert proposal.pr_title == "Updating Dependencies"
    assert proposal.pr_body == "Dependencies to Update"


@pytest.mark.unit
def test_branch_prefix_rejects_whitespace():
    with pytest.raises(ValueError):
        ProposalConfig(branch_prefix="update deps")


@pytest.mark.unit
def test_nested_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("DEPENDENCY_UPDATE_PROPOSAL__MAIN_BRANCH", "main")
    monkeypatch.setenv("DEPENDENCY_UPDATE_TIMEOUTS__REMOTE_CALL_TIMEOUT", "15")

    configured = DependencyUpdateSettings()

    assert configured.proposal.main_branch == "main"
    assert configured.timeouts.remote_call_timeout == 15


@pytest.mark.unit
def test_settings_hold_only_pipeline_sections():
    assert set(DependencyUpdateSettings.model_fields) == {
        "scratch_dir",
        "temporal_task_queue",
        "github_api",
        "proposal",
        "resolver",
        "timeouts",
    }
