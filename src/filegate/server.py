"""FastAPI application factory and route setup for FileGate."""

import logging
import secrets
import time
from collections.abc import Mapping
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from filegate.config import FileGateConfig
from filegate.dispatch import Dispatcher
from filegate.handlers import create_dispatcher
from filegate.handlers.files import COLLECTION_RESOURCE, ITEM_RESOURCE, FileContext
from filegate.models import Request as DispatchRequest
from filegate.models import Response as DispatchResponse
from filegate.storage import create_object_store
from filegate.storage.backend import ObjectStore

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

# Paths to suppress from per-request logging
_QUIET_PATHS = {"/metrics", "/health"}

# Module-level singleton so multiple create_app() calls (e.g. in tests)
# don't re-register the same Prometheus collectors in the global registry.
_instrumentator = None


def _get_instrumentator():
    global _instrumentator
    if _instrumentator is None:
        from prometheus_fastapi_instrumentator import Instrumentator

        _instrumentator = Instrumentator(excluded_handlers=["/metrics", "/health"])
    return _instrumentator


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(
    config: FileGateConfig,
    store: ObjectStore | None = None,
    environ: Mapping[str, str] | None = None,
) -> FastAPI:
    """Create and configure the FileGate FastAPI application.

    The file context and dispatcher are built immediately; the object store
    is initialized on first use or by the lifespan hook on startup, and
    closed on shutdown.

    Args:
        config: The loaded FileGate configuration.
        store: Optional pre-built object store (defaults to the configured
            backend).
        environ: Optional environment mapping for the container name
            lookup (defaults to ``os.environ``).

    Returns:
        A configured FastAPI application ready to run.
    """
    context = FileContext(
        store=store if store is not None else create_object_store(config.storage),
        environ=environ,
        default_container=config.storage.container,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize the object store on startup and close it on shutdown."""
        await context.object_store()
        logger.info("Object store initialized: %s", config.storage.backend)

        yield

        await context.close()
        logger.info("Object store closed")

    app = FastAPI(
        title="FileGate",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.state.config = config
    app.state.context = context
    app.state.dispatcher = create_dispatcher(context)

    _register_middleware(app)

    # /metrics must be registered before the catch-all route.
    if config.observability.metrics:
        import filegate.metrics as _metrics

        _metrics.init_metrics()
        _get_instrumentator().instrument(app, metric_namespace="filegate").expose(
            app, endpoint="/metrics"
        )

    _setup_routes(app)

    return app


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


def _register_middleware(app: FastAPI) -> None:
    """Register the request-id and access-log middleware."""

    @app.middleware("http")
    async def request_log_middleware(request: Request, call_next) -> Response:
        """Stamp ``x-request-id`` on every response and log one line per request."""
        request_id = secrets.token_hex(8)
        request.state.request_id = request_id
        start = time.monotonic()

        response = await call_next(request)

        duration_ms = round((time.monotonic() - start) * 1000, 2)
        response.headers["x-request-id"] = request_id

        if request.url.path not in _QUIET_PATHS:
            logger.info(
                "%s %s %d %.2fms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                    "request_id": request_id,
                },
            )

        return response


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def _to_http(response: DispatchResponse) -> Response:
    return Response(
        content=response.body,
        status_code=response.status_code,
        headers=dict(response.headers),
    )


async def _dispatch(
    request: Request, resource: str, path_parameters: dict[str, str]
) -> Response:
    dispatcher: Dispatcher = request.app.state.dispatcher
    result = await dispatcher.handle(
        DispatchRequest(
            resource=resource,
            http_method=request.method,
            path_parameters=path_parameters,
            request_id=getattr(request.state, "request_id", ""),
        )
    )
    return _to_http(result)


def _setup_routes(app: FastAPI) -> None:
    """Register the health check, the file routes and the catch-all."""

    @app.get("/health")
    async def health_check() -> Response:
        return JSONResponse({"status": "ok"})

    @app.api_route(COLLECTION_RESOURCE, methods=ALL_METHODS)
    async def handle_collection(request: Request) -> Response:
        return await _dispatch(request, COLLECTION_RESOURCE, {})

    @app.api_route("/v0/files/{id}", methods=ALL_METHODS)
    async def handle_item(id: str, request: Request) -> Response:
        return await _dispatch(request, ITEM_RESOURCE, {"id": id})

    @app.api_route("/{path:path}", methods=ALL_METHODS)
    async def handle_unmatched(path: str, request: Request) -> Response:
        return await _dispatch(request, request.url.path, {})
