"""
Dependency Update Configuration Framework

Centralized configuration for the dependency update workflow: GitHub API access,
proposal naming, resolver invocation and per-step timeouts.
"""

import tempfile
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GitHubAPIConfig(BaseModel):
    """GitHub API configuration."""

    api_base_url: str = Field(
        default="https://api.github.com",
        description="GitHub API base URL"
    )
    api_version: str = Field(
        default="2022-11-28",
        description="GitHub API version header"
    )
    user_agent: str = Field(
        default="santari/1.0",
        description="User agent for API requests"
    )
    request_timeout: int = Field(
        default=30,
        description="Individual request timeout in seconds",
        ge=5,
        le=120
    )
    branches_per_page: int = Field(
        default=100,
        description="Branches fetched per page when listing branches",
        ge=1,
        le=100
    )
    max_branch_pages: int = Field(
        default=50,
        description="Maximum pages of branches to scan",
        ge=1,
        le=1000
    )


class ProposalConfig(BaseModel):
    """Naming and content of the branch + pull request produced by a run."""

    branch_prefix: str = Field(
        default="update-deps-santari",
        description="Reserved prefix for update branches; also the duplicate guard key",
        min_length=1
    )
    max_branch_suffix: int = Field(
        default=100_000,
        description="Upper bound of the random branch name suffix",
        ge=1
    )
    main_branch: str = Field(
        default="master",
        description="Branch the manifest is read from and the pull request targets"
    )
    manifest_path: str = Field(
        default="package.json",
        description="Path of the manifest inside the repository"
    )
    commit_message: str = Field(
        default="Updating dependencies",
        description="Commit message for the manifest update"
    )
    pr_title: str = Field(
        default="Updating Dependencies",
        description="Pull request title"
    )
    pr_body: str = Field(
        default="Dependencies to Update",
        description="Pull request body heading"
    )
    list_changes_in_body: bool = Field(
        default=True,
        description="Append the changed dependency ranges to the pull request body"
    )

    @field_validator("branch_prefix")
    @classmethod
    def validate_branch_prefix(cls, v: str) -> str:
        if v.strip() != v or " " in v:
            raise ValueError("Branch prefix cannot contain whitespace")
        return v


class ResolverConfig(BaseModel):
    """npm-check-updates invocation."""

    command: List[str] = Field(
        default_factory=lambda: ["npx", "--yes", "npm-check-updates"],
        description="Command prefix used to run npm-check-updates"
    )
    timeout: int = Field(
        default=300,
        description="Resolver process timeout in seconds",
        ge=10,
        le=1800
    )


class WorkflowTimeouts(BaseModel):
    """Timeouts for the workflow steps (in seconds)."""

    remote_call_timeout: float = Field(
        default=60,
        description="Bound on every single hosting API call",
        gt=0,
        le=600
    )
    resolution_timeout: float = Field(
        default=330,
        description="Bound on the resolver step",
        gt=0,
        le=3600
    )
    workflow_run_timeout: int = Field(
        default=900,
        description="start_to_close timeout of the Temporal activity running one update",
        ge=60,
        le=7200
    )


class DependencyUpdateSettings(BaseSettings):
    """Main configuration settings for the dependency update workflow."""

    # Only variables prefixed with `DEPENDENCY_UPDATE_` are read.
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        env_prefix="DEPENDENCY_UPDATE_",
        extra="ignore",
    )

    scratch_dir: Optional[str] = Field(
        default=None,
        description="Directory for scratch manifest copies (system temp dir when unset)"
    )
    temporal_task_queue: str = Field(
        default="dependency-updates",
        description="Temporal task queue name"
    )

    github_api: GitHubAPIConfig = Field(
        default_factory=GitHubAPIConfig,
        description="GitHub API configuration"
    )
    proposal: ProposalConfig = Field(
        default_factory=ProposalConfig,
        description="Branch and pull request naming"
    )
    resolver: ResolverConfig = Field(
        default_factory=ResolverConfig,
        description="Resolver configuration"
    )
    timeouts: WorkflowTimeouts = Field(
        default_factory=WorkflowTimeouts,
        description="Timeout configuration"
    )

    def get_scratch_dir(self) -> str:
        """Directory where scratch manifests are written."""
        return self.scratch_dir or tempfile.gettempdir()


# ============================================================================
# CONFIGURATION FACTORY
# ============================================================================

def get_dependency_update_settings() -> DependencyUpdateSettings:
    """
    Get dependency update settings with environment-based overrides.

    Environment variables can override any setting using double underscore notation:
    - DEPENDENCY_UPDATE_PROPOSAL__MAIN_BRANCH=main
    - DEPENDENCY_UPDATE_TIMEOUTS__REMOTE_CALL_TIMEOUT=30
    - DEPENDENCY_UPDATE_RESOLVER__TIMEOUT=600
    """
    return DependencyUpdateSettings()


dependency_update_settings = get_dependency_update_settings()
