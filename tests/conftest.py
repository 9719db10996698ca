"""Shared pytest fixtures for FileGate tests.

Apps built here have metrics disabled so that each test can get a fresh
app without registering Prometheus collectors twice. test_observability.py
builds its own metrics-enabled app once per module.
"""

from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from filegate.config import FileGateConfig, ObservabilityConfig, StorageConfig
from filegate.handlers.files import FileContext, FileHandler
from filegate.server import create_app
from filegate.storage.memory import MemoryObjectStore

CONTAINER = "test-container"
FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


class RecordingStore:
    """Object store double that records calls and can be told to fail.

    ``delete_missing`` selects how deleting an absent key behaves:
    ``"raise"`` (FileNotFoundError) or ``"ignore"`` (idempotent, like S3).
    """

    def __init__(self, delete_missing: str = "raise") -> None:
        self.objects: dict[str, bytes] = {}
        self.calls: list[tuple] = []
        self.init_count = 0
        self.error: Exception | None = None
        self.listing: list[str] | None = None
        self.delete_missing = delete_missing

    async def init(self) -> None:
        self.init_count += 1

    async def close(self) -> None:
        self.calls.append(("close",))

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    async def list_keys(self, container: str) -> list[str]:
        self.calls.append(("list_keys", container))
        self._maybe_fail()
        if self.listing is not None:
            return list(self.listing)
        return list(self.objects)

    async def get(self, container: str, key: str) -> bytes:
        self.calls.append(("get", container, key))
        self._maybe_fail()
        try:
            return self.objects[key]
        except KeyError:
            raise FileNotFoundError(key) from None

    async def put(self, container: str, key: str, data: bytes) -> None:
        self.calls.append(("put", container, key, data))
        self._maybe_fail()
        self.objects[key] = data

    async def delete(self, container: str, key: str) -> None:
        self.calls.append(("delete", container, key))
        self._maybe_fail()
        if key not in self.objects:
            if self.delete_missing == "raise":
                raise FileNotFoundError(key)
            return
        del self.objects[key]


@pytest.fixture
def config() -> FileGateConfig:
    """Test configuration: memory backend, metrics off."""
    return FileGateConfig(
        storage=StorageConfig(backend="memory", container=CONTAINER),
        observability=ObservabilityConfig(metrics=False),
    )


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def file_context(recording_store) -> FileContext:
    return FileContext(
        store=recording_store,
        environ={"S3_BUCKET": CONTAINER},
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def file_handler(file_context) -> FileHandler:
    return FileHandler(file_context)


@pytest.fixture
def memory_store() -> MemoryObjectStore:
    return MemoryObjectStore()


@pytest.fixture
def app(config, memory_store):
    """A fresh app backed by an in-memory store and a fixed environment."""
    return create_app(config, store=memory_store, environ={"S3_BUCKET": CONTAINER})


@pytest.fixture
async def client(app) -> AsyncClient:
    """Async test client; the store initializes lazily on first request."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
