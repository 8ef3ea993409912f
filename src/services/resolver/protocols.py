"""Protocol definition for the dependency resolution engine."""

from typing import Any, Dict, Protocol


class UpdateResolver(Protocol):
    """Computes an upgraded manifest from a manifest file on disk."""

    async def resolve(self, manifest_file: str) -> Dict[str, Any]:
        """Return the full manifest with upgraded dependency ranges, or the same manifest."""
        ...
