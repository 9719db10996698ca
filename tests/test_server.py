"""Tests for the FileGate FastAPI server."""

import re

import pytest
from httpx import ASGITransport, AsyncClient

from filegate.server import create_app
from filegate.storage.memory import MemoryObjectStore


class TestHealthCheck:
    async def test_health_returns_ok(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_request_id_header(self, client):
        resp = await client.get("/health")
        assert re.fullmatch(r"[0-9a-f]{16}", resp.headers["x-request-id"])


class TestListFiles:
    async def test_empty_listing(self, client):
        resp = await client.get("/v0/files")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/json"
        assert resp.json() == {"files": []}

    async def test_lists_created_files(self, client):
        await client.post("/v0/files/b.txt")
        await client.post("/v0/files/a.txt")
        resp = await client.get("/v0/files")
        assert resp.json() == {"files": ["a.txt", "b.txt"]}


class TestFileLifecycle:
    async def test_create_then_get(self, client):
        resp = await client.post("/v0/files/report.txt", content=b"ignored body")
        assert resp.status_code == 204
        assert resp.content == b""

        resp = await client.get("/v0/files/report.txt")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == ""
        assert re.fullmatch(
            r"This file was created on \d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", resp.text
        )

    async def test_create_is_idempotent(self, client):
        assert (await client.post("/v0/files/same")).status_code == 204
        assert (await client.post("/v0/files/same")).status_code == 204
        assert (await client.get("/v0/files")).json() == {"files": ["same"]}

    async def test_get_missing(self, client):
        resp = await client.get("/v0/files/nothing-here")
        assert resp.status_code == 404
        assert resp.json() == {"error": "no such object exists"}

    async def test_delete_then_get(self, client):
        await client.post("/v0/files/tmp.txt")
        resp = await client.delete("/v0/files/tmp.txt")
        assert resp.status_code == 204
        assert resp.content == b""

        resp = await client.get("/v0/files/tmp.txt")
        assert resp.status_code == 404

    async def test_delete_missing(self, client):
        resp = await client.delete("/v0/files/never-created")
        assert resp.status_code == 404
        assert resp.json() == {"error": "no such object exists"}

    async def test_get_returns_exact_content(self, client, memory_store):
        await memory_store.put("test-container", "raw.json", b'{"a": 1}')
        resp = await client.get("/v0/files/raw.json")
        assert resp.status_code == 200
        assert resp.text == '{"a": 1}'


class TestRouteNotFound:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("POST", "/v0/files"),
            ("DELETE", "/v0/files"),
            ("PUT", "/v0/files/x"),
            ("PATCH", "/v0/files/x"),
            ("GET", "/"),
            ("GET", "/v1/files"),
            ("GET", "/v0/files/a/b"),
            ("DELETE", "/anything/else"),
        ],
    )
    async def test_unmatched(self, client, method, path):
        resp = await client.request(method, path)
        assert resp.status_code == 404
        assert resp.json() == {"error": "route not found"}


class TestMisconfiguration:
    async def test_missing_container_is_500(self, config):
        config.storage.container = ""
        app = create_app(config, store=MemoryObjectStore(), environ={})
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            for method, path in [
                ("GET", "/v0/files"),
                ("GET", "/v0/files/x"),
                ("POST", "/v0/files/x"),
                ("DELETE", "/v0/files/x"),
            ]:
                resp = await ac.request(method, path)
                assert resp.status_code == 500
                assert resp.json() == {"error": "Unexpected server error"}

    async def test_store_failure_is_opaque_500(self, config):
        class BrokenStore(MemoryObjectStore):
            async def list_keys(self, container):
                raise RuntimeError("credentials for arn:aws:secret")

        app = create_app(config, store=BrokenStore(), environ={"S3_BUCKET": "b"})
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            resp = await ac.get("/v0/files")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Unexpected server error"}
        assert "arn" not in resp.text


class TestLifespan:
    async def test_lifespan_initializes_and_closes_store(self, config, recording_store):
        app = create_app(config, store=recording_store, environ={"S3_BUCKET": "b"})
        async with app.router.lifespan_context(app):
            assert recording_store.init_count == 1
        assert ("close",) in recording_store.calls
