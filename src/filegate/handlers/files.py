"""File operation handlers for FileGate.

Implements the four file operations:
    - ListFiles   (GET    /v0/files)
    - GetFile     (GET    /v0/files/{id})
    - CreateFile  (POST   /v0/files/{id})
    - DeleteFile  (DELETE /v0/files/{id})

Each handler returns a :class:`~filegate.models.Response` on success or one
of the failure variants from :mod:`filegate.errors`. Missing objects are
recognized here; anything else is left to the dispatcher boundary.
"""

import asyncio
import logging
import os
from collections.abc import Callable, Mapping
from datetime import datetime, timezone

from filegate.config import CONTAINER_ENV_VAR
from filegate.dispatch import RouteTable, build_route_table
from filegate.errors import Failure, ObjectNotFound, UnhandledFailure, ValidationFailure, is_failure
from filegate.models import Request, Response, empty_response, json_response, text_response
from filegate.storage.backend import ObjectStore

logger = logging.getLogger(__name__)

COLLECTION_RESOURCE = "/v0/files"
ITEM_RESOURCE = "/v0/files/{id}"

MISSING_FILE_NAME = "file name must be specified"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def placeholder_body(now: datetime) -> str:
    """Content written by CreateFile, e.g.
    ``This file was created on 2024-01-01T00:00:00.000Z``.
    """
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return f"This file was created on {stamp.replace('+00:00', 'Z')}"


class FileContext:
    """Per-process resources shared by the file handlers.

    The object store is initialized lazily on first use and reused for the
    life of the process. The container name is looked up on every request.

    Attributes:
        store: The object store backend.
        environ: Environment mapping consulted for ``S3_BUCKET``.
        default_container: Fallback container name from the config file.
        clock: Returns the current time; used for placeholder content.
    """

    def __init__(
        self,
        store: ObjectStore,
        environ: Mapping[str, str] | None = None,
        default_container: str = "",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.environ = os.environ if environ is None else environ
        self.default_container = default_container
        self.clock = clock
        self._ready = False
        self._init_lock: asyncio.Lock | None = None

    async def object_store(self) -> ObjectStore:
        """Return the store, running its ``init()`` exactly once."""
        if self._ready:
            return self.store
        if self._init_lock is None:
            self._init_lock = asyncio.Lock()
        async with self._init_lock:
            if not self._ready:
                await self.store.init()
                self._ready = True
        return self.store

    async def close(self) -> None:
        if self._ready:
            await self.store.close()
            self._ready = False

    def get_container_name(self) -> str | UnhandledFailure:
        """Return the configured container name.

        A missing value is a server misconfiguration, never a client error.
        """
        name = self.environ.get(CONTAINER_ENV_VAR) or self.default_container
        if not name:
            return UnhandledFailure(
                detail=f"{CONTAINER_ENV_VAR} environment variable has not been specified"
            )
        return name


def extract_key(request: Request) -> str | ValidationFailure:
    """Return the object key from the ``id`` path parameter."""
    key = (request.path_parameters or {}).get("id")
    if not key:
        return ValidationFailure(MISSING_FILE_NAME)
    return key


class FileHandler:
    """Handles file operations against the configured container."""

    def __init__(self, context: FileContext) -> None:
        self.context = context

    def _resolve_item(self, request: Request) -> tuple[str, str] | Failure:
        container = self.context.get_container_name()
        if is_failure(container):
            return container
        key = extract_key(request)
        if is_failure(key):
            return key
        return container, key

    async def list_files(self, request: Request) -> Response | Failure:
        """List all keys in the container (single page)."""
        container = self.context.get_container_name()
        if is_failure(container):
            return container

        store = await self.context.object_store()
        keys = await store.list_keys(container)
        return json_response(200, {"files": list(keys)})

    async def get_file(self, request: Request) -> Response | Failure:
        """Return the object's content as raw text."""
        resolved = self._resolve_item(request)
        if is_failure(resolved):
            return resolved
        container, key = resolved

        store = await self.context.object_store()
        try:
            data = await store.get(container, key)
        except FileNotFoundError:
            return ObjectNotFound(key)
        return text_response(data.decode("utf-8", errors="replace"))

    async def create_file(self, request: Request) -> Response | Failure:
        """Write placeholder content recording the creation time.

        The request body is ignored. An existing object is overwritten.
        """
        resolved = self._resolve_item(request)
        if is_failure(resolved):
            return resolved
        container, key = resolved

        store = await self.context.object_store()
        await store.put(container, key, placeholder_body(self.context.clock()).encode("utf-8"))
        logger.debug("Created %s/%s", container, key)
        return empty_response()

    async def delete_file(self, request: Request) -> Response | Failure:
        """Delete the object."""
        resolved = self._resolve_item(request)
        if is_failure(resolved):
            return resolved
        container, key = resolved

        store = await self.context.object_store()
        try:
            await store.delete(container, key)
        except FileNotFoundError:
            return ObjectNotFound(key)
        logger.debug("Deleted %s/%s", container, key)
        return empty_response()


def file_routes(handler: FileHandler) -> RouteTable:
    """Build the FileGate route table."""
    return build_route_table(
        {
            COLLECTION_RESOURCE: {
                "GET": handler.list_files,
            },
            ITEM_RESOURCE: {
                "GET": handler.get_file,
                "POST": handler.create_file,
                "DELETE": handler.delete_file,
            },
        }
    )
