"""
Manifest Service

Reads package.json from the remote into a ManifestSnapshot, keeps the local
scratch copy the resolver works on, and turns resolver output into an
UpdateSet with the package's next minor version.
"""

import base64
import binascii
import json
import re
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import semver

from src.exceptions.dependency_update_exceptions import ManifestDecodeError, ManifestVersionError
from src.models.schemas.dependency_update import ManifestSnapshot, RemoteFile, RepositoryHandle, UpdateSet
from src.services.github.protocols import RemoteRepositoryGateway
from src.utils.logging.otel_logger import get_logger

logger = get_logger(__name__)

# Leading "v" and "=" are accepted in front of a version, as npm does
VERSION_PREFIX = re.compile(r"^[v=\s]+")

DEPENDENCY_SECTIONS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)


def decode_manifest(remote_file: RemoteFile) -> Tuple[str, Dict[str, Any]]:
    """
    Decode transport-encoded manifest content into text and parsed JSON.

    Raises:
        ManifestDecodeError: If the content is not base64 text holding a JSON object
    """
    path = remote_file.path
    if remote_file.encoding not in (None, "base64"):
        raise ManifestDecodeError(path, f"unsupported transport encoding {remote_file.encoding!r}")

    try:
        raw = base64.b64decode(remote_file.content).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise ManifestDecodeError(path, f"invalid base64 content: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ManifestDecodeError(path, f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ManifestDecodeError(path, "top-level JSON value is not an object")

    return raw, data


def bump_minor_version(version: Optional[str]) -> str:
    """Increment the minor component, reset patch, drop pre-release and build metadata.

    Examples:
        "1.2.3" → "1.3.0"
        "2.4.9-beta.1" → "2.5.0"
        "0.9.0+build.7" → "0.10.0"
        "v1.2.3" → "1.3.0"
    """
    if not isinstance(version, str):
        raise ManifestVersionError(version)
    try:
        parsed = semver.Version.parse(VERSION_PREFIX.sub("", version).strip())
    except ValueError as e:
        raise ManifestVersionError(version) from e
    return str(parsed.bump_minor())


def apply_version(data: Dict[str, Any], version: str) -> Dict[str, Any]:
    """Return a copy of data with its own version replaced, key order kept."""
    return {**data, "version": version}


def serialize_manifest(data: Dict[str, Any]) -> str:
    """Serialize with 2-space indentation and a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def compute_update_set(original: Dict[str, Any], upgraded: Dict[str, Any]) -> UpdateSet:
    """
    Compare resolver output with the original manifest.

    Equality is structural over the whole manifest, not only the dependency
    sections. When they differ the next version is derived from the upgraded
    manifest's own version.
    """
    if upgraded == original:
        return UpdateSet.none()

    return UpdateSet(
        has_changes=True,
        upgraded=upgraded,
        next_version=bump_minor_version(upgraded.get("version")),
    )


def describe_changes(original: Dict[str, Any], upgraded: Dict[str, Any]) -> List[str]:
    """List changed dependency ranges as markdown bullet lines."""
    lines = []
    for section in DEPENDENCY_SECTIONS:
        before = original.get(section) or {}
        after = upgraded.get(section) or {}
        if not isinstance(before, dict) or not isinstance(after, dict):
            continue
        for name, new_range in after.items():
            old_range = before.get(name)
            if old_range is None:
                lines.append(f"- `{name}` ({section}): added `{new_range}`")
            elif old_range != new_range:
                lines.append(f"- `{name}` ({section}): `{old_range}` → `{new_range}`")
    return lines


class ManifestService:
    """Fetches manifests through the gateway and manages scratch copies."""

    def __init__(self, gateway: RemoteRepositoryGateway, scratch_dir: str):
        self.gateway = gateway
        self.scratch_dir = Path(scratch_dir)

    async def fetch_manifest(
        self,
        repository: RepositoryHandle,
        ref: str,
        path: str = "package.json",
    ) -> ManifestSnapshot:
        """
        Read and parse the manifest from ref, writing a scratch copy for the resolver.

        Args:
            repository: Target repository
            ref: Commit SHA (or branch) to read from
            path: Manifest path inside the repository

        Returns:
            ManifestSnapshot carrying the blob SHA as revision marker

        Raises:
            ManifestNotFoundError: If the manifest doesn't exist
            ManifestDecodeError: If the content cannot be decoded or parsed
        """
        remote_file = await self.gateway.get_file(repository, path, ref)
        raw, data = decode_manifest(remote_file)
        scratch_path = self.write_scratch_file(raw)

        logger.info(
            f"Read {remote_file.path} from {repository}@{ref} "
            f"(revision {remote_file.sha[:8]}, scratch copy {scratch_path})"
        )

        return ManifestSnapshot(
            revision=remote_file.sha,
            path=remote_file.path,
            data=data,
            raw=raw,
            scratch_path=str(scratch_path),
        )

    def write_scratch_file(self, raw: str) -> Path:
        """Persist decoded manifest text to a unique file in the scratch directory."""
        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        scratch_path = self.scratch_dir / f"package_{uuid.uuid4().hex}.json"
        scratch_path.write_text(raw, encoding="utf-8")
        return scratch_path

    def discard_scratch_file(self, snapshot: ManifestSnapshot) -> None:
        """Remove the scratch copy; a failure here is only logged."""
        if not snapshot.scratch_path:
            return
        try:
            Path(snapshot.scratch_path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove scratch manifest {snapshot.scratch_path}: {e}")
