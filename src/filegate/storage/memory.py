"""In-memory object store for FileGate.

Holds all objects in a dictionary. State is lost on restart; intended for
tests and local experiments.
"""

import logging

logger = logging.getLogger(__name__)


class MemoryObjectStore:
    """Object store that keeps objects in a ``{(container, key): bytes}`` dict."""

    def __init__(self) -> None:
        self._objects: dict[tuple[str, str], bytes] = {}

    async def init(self) -> None:
        logger.info("Memory object store initialized")

    async def close(self) -> None:
        self._objects.clear()

    async def list_keys(self, container: str) -> list[str]:
        return sorted(key for (c, key) in self._objects if c == container)

    async def get(self, container: str, key: str) -> bytes:
        try:
            return self._objects[(container, key)]
        except KeyError:
            raise FileNotFoundError(f"Object not found: {container}/{key}") from None

    async def put(self, container: str, key: str, data: bytes) -> None:
        self._objects[(container, key)] = bytes(data)

    async def delete(self, container: str, key: str) -> None:
        try:
            del self._objects[(container, key)]
        except KeyError:
            raise FileNotFoundError(f"Object not found: {container}/{key}") from None
