"""Shared fixtures for the dependency update tests."""

import pytest

from src.core.dependency_update_config import DependencyUpdateSettings, ProposalConfig
from src.models.schemas.dependency_update import RepositoryHandle


@pytest.fixture
def repository():
    return RepositoryHandle(full_name="owner/test-repo")


@pytest.fixture
def update_settings(tmp_path):
    return DependencyUpdateSettings(
        scratch_dir=str(tmp_path / "scratch"),
        proposal=ProposalConfig(main_branch="master"),
    )


@pytest.fixture
def sample_manifest():
    return {
        "name": "test-package",
        "version": "2.4.9",
        "dependencies": {"a": "^1.0.0"},
    }
