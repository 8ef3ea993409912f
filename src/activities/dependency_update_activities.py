"""
Dependency Update Activities

Temporal activity that executes one UpdateWorkflow run. The whole run is a
single activity so its remote calls stay strictly sequential and are never
replayed step by step.
"""

from typing import Any, Dict

from temporalio import activity
from temporalio.exceptions import ApplicationError

from src.core.config import require_github_key
from src.core.dependency_update_config import dependency_update_settings
from src.exceptions.dependency_update_exceptions import (
    DependencyUpdateException,
    DuplicateProposalError,
)
from src.services.dependency_update.update_workflow import UpdateWorkflow
from src.services.github.repo_api_client import RepoApiClient
from src.services.resolver.ncu_resolver import NcuResolver
from src.utils.logging.otel_logger import get_logger

logger = get_logger(__name__)


@activity.defn
async def run_dependency_update_activity(input_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run the dependency update state machine for one repository.

    Args:
        input_data: Contains repo_name in owner/repo format

    Returns:
        Status, branch, pull request and next version of the run

    Raises:
        ApplicationError: Non-retryable, for every failure other than a pending proposal
    """
    repo_name = input_data["repo_name"]

    gateway = RepoApiClient(
        token=require_github_key(),
        config=dependency_update_settings.github_api,
    )
    resolver = NcuResolver(
        command=dependency_update_settings.resolver.command,
        timeout=dependency_update_settings.resolver.timeout,
    )
    update_workflow = UpdateWorkflow(repo_name, gateway, resolver, dependency_update_settings)

    try:
        outcome = await update_workflow.run()

    except DuplicateProposalError as exc:
        return {
            "status": "duplicate",
            "repo_name": repo_name,
            "branch_name": None,
            "message": str(exc),
        }

    except DependencyUpdateException as exc:
        raise ApplicationError(
            str(exc),
            {"branch_name": update_workflow.update_branch.name if update_workflow.update_branch else None},
            type=type(exc).__name__,
            non_retryable=True,
        ) from exc

    except Exception as exc:
        logger.error(f"Unexpected error updating dependencies of {repo_name}: {exc}", exc_info=True)
        raise ApplicationError(str(exc), type=type(exc).__name__, non_retryable=True) from exc

    return {
        "status": "up_to_date" if outcome.up_to_date else "completed",
        "repo_name": repo_name,
        "branch_name": outcome.branch_name,
        "pull_request_number": outcome.pull_request.number if outcome.pull_request else None,
        "pull_request_url": outcome.pull_request.url if outcome.pull_request else None,
        "next_version": outcome.next_version,
        "transitions": [t.state.value for t in outcome.transitions],
    }


DEPENDENCY_UPDATE_ACTIVITIES = [
    run_dependency_update_activity,
]
