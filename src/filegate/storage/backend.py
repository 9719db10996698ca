"""Abstract object store protocol for FileGate."""

from typing import Protocol


class ObjectStore(Protocol):
    """Protocol defining the object store interface.

    Every backend (AWS S3, local filesystem, in-memory) operates on keys
    inside a named container. Missing keys are reported by raising
    ``FileNotFoundError``.
    """

    async def init(self) -> None:
        """Open connections or create directories."""
        ...

    async def close(self) -> None:
        """Release resources held by the store."""
        ...

    async def list_keys(self, container: str) -> list[str]:
        """Enumerate object keys in a container.

        Returns a single page of keys in the store's enumeration order. An
        empty container yields an empty list.

        Args:
            container: The container name.

        Returns:
            The object keys.
        """
        ...

    async def get(self, container: str, key: str) -> bytes:
        """Fetch an object's bytes.

        Args:
            container: The container name.
            key: The object key.

        Returns:
            The raw bytes of the object.

        Raises:
            FileNotFoundError: If the key does not exist.
        """
        ...

    async def put(self, container: str, key: str, data: bytes) -> None:
        """Create or overwrite an object.

        Args:
            container: The container name.
            key: The object key.
            data: The raw bytes to store.
        """
        ...

    async def delete(self, container: str, key: str) -> None:
        """Delete an object.

        Backends either succeed idempotently on a missing key or raise
        ``FileNotFoundError``.

        Args:
            container: The container name.
            key: The object key.
        """
        ...
