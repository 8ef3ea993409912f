"""
Dependency Update Workflow

State machine that turns outdated dependencies of one repository into a single
update proposal (branch + commit + pull request).

    IDLE → GUARD_CHECKED → MAIN_BRANCH_READ → MANIFEST_READ → RESOLVED
         → BRANCH_CREATED → MANIFEST_COMMITTED → PR_OPENED → DONE

RESOLVED with nothing to update goes straight to DONE. Any failure moves the
run to FAILED and re-raises; nothing is retried or rolled back.
"""

import asyncio
import random
from datetime import datetime, timezone
from typing import Awaitable, List, Optional, TypeVar, Union

from src.core.dependency_update_config import DependencyUpdateSettings, dependency_update_settings
from src.exceptions.dependency_update_exceptions import (
    DuplicateProposalError,
    RemoteTimeoutError,
    ResolutionError,
    RevisionInvalidError,
)
from src.models.schemas.dependency_update import (
    BranchRef,
    ManifestSnapshot,
    PullRequest,
    PullRequestRequest,
    RepositoryHandle,
    StateTransition,
    UpdateOutcome,
    UpdateSet,
    WorkflowState,
)
from src.services.dependency_update.duplicate_guard import DuplicateGuard
from src.services.github.protocols import RemoteRepositoryGateway
from src.services.manifest.manifest_service import (
    ManifestService,
    apply_version,
    compute_update_set,
    describe_changes,
    serialize_manifest,
)
from src.services.resolver.protocols import UpdateResolver
from src.utils.logging.otel_logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def generate_branch_name(prefix: str, max_suffix: int = 100_000) -> str:
    """Update branch name for one run, e.g. update-deps-santari-4217."""
    return f"{prefix}-{random.randint(1, max_suffix)}"


class UpdateWorkflow:
    """
    One dependency update run against one repository.

    Instances are single-use: construct a new one per run. The gateway and
    resolver are injected so runs against different repositories can share a
    client while keeping their revision markers apart.
    """

    def __init__(
        self,
        repository: Union[RepositoryHandle, str],
        gateway: RemoteRepositoryGateway,
        resolver: UpdateResolver,
        config: Optional[DependencyUpdateSettings] = None,
    ):
        if isinstance(repository, str):
            repository = RepositoryHandle(full_name=repository)
        self.repository = repository
        self.gateway = gateway
        self.resolver = resolver
        self.config = config or dependency_update_settings

        proposal = self.config.proposal
        self.guard = DuplicateGuard(gateway, proposal.branch_prefix)
        self.manifest_service = ManifestService(gateway, self.config.get_scratch_dir())
        self.branch_name = generate_branch_name(proposal.branch_prefix, proposal.max_branch_suffix)

        self.state = WorkflowState.IDLE
        self.failure_reason: Optional[str] = None
        self.transitions: List[StateTransition] = []

        self.main_branch: Optional[BranchRef] = None
        self.snapshot: Optional[ManifestSnapshot] = None
        self.update_set: Optional[UpdateSet] = None
        self.update_branch: Optional[BranchRef] = None
        self.commit_sha: Optional[str] = None
        self.pull_request: Optional[PullRequest] = None

    async def run(self) -> UpdateOutcome:
        """
        Execute the whole run.

        Returns:
            UpdateOutcome; up_to_date is True when nothing needed updating

        Raises:
            DuplicateProposalError: If an update proposal is already pending
            DependencyUpdateException: Any other step failure, see exceptions module
        """
        if self.state is not WorkflowState.IDLE:
            raise RuntimeError(f"UpdateWorkflow for {self.repository} already ran (state {self.state.value})")

        logger.info(f"Starting dependency update for {self.repository} (branch {self.branch_name})")

        try:
            await self._check_guard()
            await self._read_main_branch()
            await self._read_manifest()
            await self._resolve()

            if not self.update_set.has_changes:
                logger.info(f"No dependency updates needed for {self.repository}")
                self._transition(WorkflowState.DONE, "no update needed")
                return self._outcome()

            await self._create_branch()
            await self._commit_manifest()
            await self._open_pull_request()
        except Exception as exc:
            self._fail(exc)
            raise

        self._transition(WorkflowState.DONE)
        logger.info(
            f"Dependency update for {self.repository} finished: "
            f"PR #{self.pull_request.number} from {self.branch_name}"
        )
        return self._outcome()

    # ========================================================================
    # STEPS
    # ========================================================================

    async def _check_guard(self) -> None:
        await self._remote("list branches", self.guard.check_no_active_proposal(self.repository))
        self._transition(WorkflowState.GUARD_CHECKED)

    async def _read_main_branch(self) -> None:
        main_branch = self.config.proposal.main_branch
        self.main_branch = await self._remote(
            "get main branch", self.gateway.get_branch(self.repository, main_branch)
        )
        self._transition(WorkflowState.MAIN_BRANCH_READ, f"{main_branch}@{self.main_branch.sha}")

    async def _read_manifest(self) -> None:
        self.snapshot = await self._remote(
            "get manifest",
            self.manifest_service.fetch_manifest(
                self.repository,
                ref=self.main_branch.sha,
                path=self.config.proposal.manifest_path,
            ),
        )
        self._transition(WorkflowState.MANIFEST_READ, f"{self.snapshot.path}@{self.snapshot.revision}")

    async def _resolve(self) -> None:
        timeout = self.config.timeouts.resolution_timeout
        try:
            upgraded = await asyncio.wait_for(
                self.resolver.resolve(self.snapshot.scratch_path), timeout=timeout
            )
        except ResolutionError:
            raise
        except asyncio.TimeoutError as e:
            raise ResolutionError(f"resolver did not finish within {timeout}s") from e
        except Exception as e:
            raise ResolutionError(str(e)) from e
        finally:
            self.manifest_service.discard_scratch_file(self.snapshot)

        self.update_set = compute_update_set(self.snapshot.data, upgraded)
        self._transition(
            WorkflowState.RESOLVED,
            f"changes, next version {self.update_set.next_version}" if self.update_set.has_changes else "none",
        )

    async def _create_branch(self) -> None:
        from_sha = self.main_branch.sha if self.main_branch else ""
        if not from_sha:
            raise RevisionInvalidError(from_sha, "main branch revision was not read")

        self.update_branch = await self._remote(
            "create branch",
            self.gateway.create_branch(self.repository, self.branch_name, from_sha),
        )
        self._transition(WorkflowState.BRANCH_CREATED, self.update_branch.name)

    async def _commit_manifest(self) -> None:
        content = apply_version(self.update_set.upgraded, self.update_set.next_version)
        self.commit_sha = await self._remote(
            "update manifest",
            self.gateway.update_file(
                self.repository,
                path=self.snapshot.path,
                content=serialize_manifest(content),
                message=self.config.proposal.commit_message,
                revision=self.snapshot.revision,
                branch=self.update_branch.name,
            ),
        )
        self._transition(WorkflowState.MANIFEST_COMMITTED, self.commit_sha)

    async def _open_pull_request(self) -> None:
        self.pull_request = await self._remote(
            "open pull request",
            self.gateway.open_pull_request(self.repository, self._build_pull_request_request()),
        )
        self._transition(WorkflowState.PR_OPENED, f"#{self.pull_request.number}")

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _build_pull_request_request(self) -> PullRequestRequest:
        proposal = self.config.proposal
        body = proposal.pr_body
        if proposal.list_changes_in_body:
            changes = describe_changes(self.snapshot.data, self.update_set.upgraded)
            if changes:
                body = "\n".join([body, "", *changes])

        return PullRequestRequest(
            title=proposal.pr_title,
            body=body,
            head=self.update_branch.name,
            base=self.main_branch.name,
        )

    async def _remote(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Await one remote step, bounded by the configured per-call timeout."""
        timeout = self.config.timeouts.remote_call_timeout
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise RemoteTimeoutError(operation, timeout) from e

    def _transition(self, state: WorkflowState, detail: Optional[str] = None) -> None:
        self.transitions.append(
            StateTransition(state=state, detail=detail, at=datetime.now(timezone.utc))
        )
        self.state = state
        logger.debug(f"{self.repository}: -> {state.value}" + (f" ({detail})" if detail else ""))

    def _fail(self, exc: Exception) -> None:
        failed_in = self.state
        self.failure_reason = str(exc)
        self._transition(WorkflowState.FAILED, f"{type(exc).__name__}: {exc}")

        if isinstance(exc, DuplicateProposalError):
            logger.warning(f"Skipping dependency update for {self.repository}: {exc}")
        else:
            logger.error(
                f"Dependency update for {self.repository} failed after {failed_in.value}: {exc}"
            )

        if self.update_branch is not None:
            logger.error(
                f"Branch {self.update_branch.name} was left in {self.repository} "
                f"and needs manual cleanup"
            )

    def _outcome(self) -> UpdateOutcome:
        return UpdateOutcome(
            repository=self.repository.full_name,
            state=self.state,
            up_to_date=not self.update_set.has_changes,
            branch_name=self.update_branch.name if self.update_branch else None,
            pull_request=self.pull_request,
            next_version=self.update_set.next_version,
            transitions=list(self.transitions),
        )
