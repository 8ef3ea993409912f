"""
npm-check-updates Resolver

Runs npm-check-updates against a manifest file and returns the upgraded
manifest it prints with --jsonAll.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional

from src.core.dependency_update_config import dependency_update_settings
from src.exceptions.dependency_update_exceptions import ResolutionError
from src.utils.logging.otel_logger import get_logger

logger = get_logger(__name__)


class NcuResolver:
    """UpdateResolver backed by the npm-check-updates CLI."""

    def __init__(self, command: Optional[List[str]] = None, timeout: Optional[float] = None):
        self.command = list(command or dependency_update_settings.resolver.command)
        self.timeout = timeout or dependency_update_settings.resolver.timeout

    def build_command(self, manifest_file: str) -> List[str]:
        return [*self.command, "--packageFile", manifest_file, "--jsonAll", "--silent"]

    async def resolve(self, manifest_file: str) -> Dict[str, Any]:
        """
        Run npm-check-updates and parse its JSON output.

        Uses stdin=DEVNULL so the process can never block on a prompt.

        Raises:
            ResolutionError: If the process cannot start, times out, exits non-zero
                or prints something other than a JSON object
        """
        cmd = self.build_command(manifest_file)
        logger.info(f"Resolving dependency updates for {manifest_file}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ResolutionError(f"could not start {cmd[0]}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            await self._kill(process)
            raise ResolutionError(f"{cmd[0]} timed out after {self.timeout}s")
        except BaseException:
            # Cancelled from outside (caller timeout or activity cancellation)
            await self._kill(process)
            raise

        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise ResolutionError(f"{cmd[0]} exited with {process.returncode}: {detail}")

        try:
            result = json.loads(stdout.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ResolutionError(f"unparseable resolver output: {e}") from e

        if not isinstance(result, dict):
            raise ResolutionError("resolver output is not a JSON object")

        return result

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        """Kill the resolver process if still running and reap it."""
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()
