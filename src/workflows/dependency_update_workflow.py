"""
Dependency Update Temporal Workflow

Schedules one dependency update run per repository. Temporal only provides
durable scheduling here: the activity runs with a single attempt, and workflow
ids carry a per-run suffix so Temporal never acts as a per-repository lock.
"""

import uuid
from datetime import timedelta
from typing import Optional

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError

with workflow.unsafe.imports_passed_through():
    from src.activities.dependency_update_activities import run_dependency_update_activity
    from src.core.dependency_update_config import dependency_update_settings
    from src.models.schemas.dependency_update import (
        DependencyUpdateRequest,
        DependencyUpdateResult,
    )
    from src.utils.logging.otel_logger import get_logger

logger = get_logger(__name__)


@workflow.defn
class DependencyUpdateWorkflow:
    """Workflow wrapping a single dependency update run."""

    @workflow.run
    async def run(self, request: DependencyUpdateRequest) -> DependencyUpdateResult:
        workflow_id = workflow.info().workflow_id
        start_time = workflow.now()
        logger.info(f"Starting dependency update workflow {workflow_id} for {request.github_repo_name}")

        no_retry = RetryPolicy(maximum_attempts=1)

        try:
            result = await workflow.execute_activity(
                run_dependency_update_activity,
                {"repo_name": request.github_repo_name},
                start_to_close_timeout=timedelta(
                    seconds=dependency_update_settings.timeouts.workflow_run_timeout
                ),
                retry_policy=no_retry,
            )

            duration_ms = int((workflow.now() - start_time).total_seconds() * 1000)

            return DependencyUpdateResult(
                status=result["status"],
                github_repo_name=request.github_repo_name,
                branch_name=result.get("branch_name"),
                pull_request_number=result.get("pull_request_number"),
                pull_request_url=result.get("pull_request_url"),
                next_version=result.get("next_version"),
                processing_duration_ms=duration_ms,
                error_message=result.get("message") if result["status"] == "duplicate" else None,
                completed_at=workflow.now(),
            )
        except ActivityError as exc:
            cause = exc.cause or exc
            logger.error(
                f"Dependency update workflow failed for {request.github_repo_name}: {cause}"
            )
            duration_ms = int((workflow.now() - start_time).total_seconds() * 1000)
            return DependencyUpdateResult(
                status="failed",
                github_repo_name=request.github_repo_name,
                processing_duration_ms=duration_ms,
                error_message=str(cause),
                completed_at=workflow.now(),
            )


# ============================================================================
# WORKFLOW HELPER FUNCTIONS
# ============================================================================

def create_dependency_update_workflow_id(repo_name: str, run_suffix: Optional[str] = None) -> str:
    """Create a workflow ID for one dependency update run."""
    run_suffix = run_suffix or uuid.uuid4().hex[:12]
    return f"dependency-update:{repo_name}:{run_suffix}"


def create_dependency_update_task_queue() -> str:
    """Get the task queue name for dependency update workflows."""
    return dependency_update_settings.temporal_task_queue


async def start_dependency_update_workflow(
    temporal_client,
    request: DependencyUpdateRequest,
    workflow_id: Optional[str] = None,
) -> str:
    """Start a dependency update workflow with consistent configuration."""
    if not workflow_id:
        workflow_id = create_dependency_update_workflow_id(request.github_repo_name)

    await temporal_client.start_workflow(
        DependencyUpdateWorkflow.run,
        request,
        id=workflow_id,
        task_queue=create_dependency_update_task_queue(),
        execution_timeout=timedelta(
            seconds=dependency_update_settings.timeouts.workflow_run_timeout * 2
        ),
    )

    logger.info(f"Started dependency update workflow {workflow_id} for {request.github_repo_name}")
    return workflow_id
