import asyncio
import sys
from temporalio.worker import Worker
from temporalio.worker.workflow_sandbox import SandboxedWorkflowRunner, SandboxRestrictions
from src.utils.logging.otel_logger import logger
from src.workflows.dependency_update_workflow import (
    DependencyUpdateWorkflow,
    create_dependency_update_task_queue,
)
from src.activities.dependency_update_activities import DEPENDENCY_UPDATE_ACTIVITIES
from src.core.config import MissingCredentialsError, require_github_key, settings
from src.core.temporal_client import connect_to_temporal_with_retry


async def main():
    # The access token is read once here; a missing token stops the process
    # before any workflow can be picked up.
    try:
        require_github_key()
    except MissingCredentialsError as e:
        logger.error(str(e))
        sys.exit(1)

    target_host = settings.TEMPORAL_SERVER_URL
    logger.info(f"Connecting to Temporal server at {target_host}...")

    client = await connect_to_temporal_with_retry(target_host=target_host)

    # These modules do I/O at import time (read .env files, create thread locals, etc.)
    # but are not actually used inside workflow code - only in activities
    restrictions = SandboxRestrictions.default.with_passthrough_modules(
        "pydantic_settings",
        "dotenv",
        "httpx",
        "sniffio",
        "semver",
        "src",
    )
    worker = Worker(
        client,
        task_queue=create_dependency_update_task_queue(),
        workflows=[DependencyUpdateWorkflow],
        activities=DEPENDENCY_UPDATE_ACTIVITIES,
        workflow_runner=SandboxedWorkflowRunner(restrictions=restrictions),
    )
    logger.info("Temporal worker started")
    logger.info(f"Connected to temporal host {target_host}. Polling for task queue {worker.task_queue}")
    try:
        await worker.run()
    except Exception as e:
        logger.error(f"Error starting temporal worker: {e}")
        raise


if __name__ == "__main__":
    asyncio.run(main())
