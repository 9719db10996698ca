"""Local filesystem object store for FileGate.

Objects are stored under ``{root}/{container}/{key}``. Useful for
development without an S3 bucket.

Crash-only design:
    - Atomic writes via temp-fsync-rename pattern.
    - Startup cleans orphan temp files left by interrupted writes.
"""

import logging
import os
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

_TMP_MARKER = ".tmp."


class LocalObjectStore:
    """Object store that persists objects on the local filesystem.

    Attributes:
        root: The root directory holding one subdirectory per container.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _container_dir(self, container: str) -> Path:
        return self.root / container

    def _object_path(self, container: str, key: str) -> Path:
        """Return the filesystem path for an object.

        Keys map one-to-one onto files, so only canonical relative paths
        are accepted.

        Raises:
            PermissionError: If the key resolves outside the container
                directory (e.g. ``../secret``) or is not in canonical form
                (e.g. ``a/./b``, ``a/../b``, ``dir/``).
        """
        base = self._container_dir(container).resolve()
        path = (base / key).resolve()
        if path == base or base not in path.parents:
            raise PermissionError(f"Key escapes container directory: {key!r}")
        if path.relative_to(base).as_posix() != key:
            raise PermissionError(f"Key is not a canonical path: {key!r}")
        return path

    async def init(self) -> None:
        """Create the root directory and clean up orphan temp files."""
        self.root.mkdir(parents=True, exist_ok=True)
        self._clean_temp_files()
        logger.info("Local object store initialized at %s", self.root)

    def _clean_temp_files(self) -> None:
        """Remove orphan temp files left by interrupted atomic writes."""
        count = 0
        for dirpath, _dirnames, filenames in os.walk(self.root):
            for fname in filenames:
                if _TMP_MARKER in fname:
                    try:
                        os.unlink(os.path.join(dirpath, fname))
                        count += 1
                    except OSError:
                        logger.warning("Could not remove temp file %s", fname)
        if count > 0:
            logger.info("Cleaned %d orphan temp files on startup", count)

    async def close(self) -> None:
        """No-op for the local filesystem store."""

    async def list_keys(self, container: str) -> list[str]:
        """List keys as ``/``-separated paths relative to the container, sorted."""
        base = self._container_dir(container)
        if not base.is_dir():
            return []
        keys = [
            path.relative_to(base).as_posix()
            for path in base.rglob("*")
            if path.is_file() and _TMP_MARKER not in path.name
        ]
        return sorted(keys)

    async def get(self, container: str, key: str) -> bytes:
        """Read an object's bytes.

        Raises:
            FileNotFoundError: If the object does not exist on disk.
        """
        path = self._object_path(container, key)
        if not path.is_file():
            raise FileNotFoundError(f"Object not found: {container}/{key}")
        return path.read_bytes()

    async def put(self, container: str, key: str, data: bytes) -> None:
        """Write an object's bytes using temp-fsync-rename."""
        path = self._object_path(container, key)
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp = path.with_name(f"{path.name}{_TMP_MARKER}{uuid.uuid4().hex[:8]}")
        try:
            fd = os.open(str(tmp), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
            try:
                os.write(fd, data)
                os.fsync(fd)
            finally:
                os.close(fd)
            tmp.replace(path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

    async def delete(self, container: str, key: str) -> None:
        """Delete an object and prune empty parent directories.

        Raises:
            FileNotFoundError: If the object does not exist.
        """
        path = self._object_path(container, key)
        if not path.is_file():
            raise FileNotFoundError(f"Object not found: {container}/{key}")
        path.unlink()

        # Clean up empty parent directories (up to container dir)
        base = self._container_dir(container).resolve()
        parent = path.parent
        while parent != base and base in parent.parents:
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent
