import asyncio
from temporalio.client import Client
from temporalio.contrib.pydantic import pydantic_data_converter
from src.core.config import settings
from src.utils.logging.otel_logger import get_logger

logger = get_logger(__name__)

# Temporal connection retry configuration
TEMPORAL_MAX_RETRIES = 30  # Keep trying for a long time
TEMPORAL_BASE_DELAY = 2.0  # Start with 2 seconds
TEMPORAL_MAX_DELAY = 60.0  # Cap at 60 seconds between retries


async def connect_to_temporal_with_retry(
    target_host: str | None = None,
    namespace: str | None = None,
    max_retries: int = TEMPORAL_MAX_RETRIES,
    base_delay: float = TEMPORAL_BASE_DELAY,
    max_delay: float = TEMPORAL_MAX_DELAY,
) -> Client:
    """
    Connect to Temporal server with retry and exponential backoff.

    This only covers process startup, when Temporal may still be initializing.
    Dependency update runs themselves are never retried.

    Args:
        target_host: Temporal server URL (defaults to settings.TEMPORAL_SERVER_URL)
        namespace: Temporal namespace (defaults to settings.TEMPORAL_NAMESPACE)
        max_retries: Maximum number of retry attempts (default: 30)
        base_delay: Initial delay in seconds before first retry (default: 2.0)
        max_delay: Maximum delay between retries in seconds (default: 60.0)

    Returns:
        Connected Temporal Client using the pydantic data converter

    Raises:
        Exception: If all retries are exhausted
    """
    if target_host is None:
        target_host = settings.TEMPORAL_SERVER_URL
    if namespace is None:
        namespace = settings.TEMPORAL_NAMESPACE

    for attempt in range(max_retries + 1):
        try:
            client = await Client.connect(
                target_host,
                namespace=namespace,
                data_converter=pydantic_data_converter,
            )
            logger.info(f"Successfully connected to Temporal server at {target_host}")
            return client

        except Exception as e:
            if attempt == max_retries:
                logger.error(
                    f"Failed to connect to Temporal after {max_retries + 1} attempts: {e}"
                )
                raise

            # Calculate delay with exponential backoff (capped at max_delay)
            delay = min(base_delay * (2 ** attempt), max_delay)

            logger.warning(
                f"Temporal connection attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                f"Retrying in {delay:.1f}s..."
            )

            await asyncio.sleep(delay)

    raise RuntimeError("Unexpected state in connect_to_temporal_with_retry")
