"""AWS Lambda entry point for FileGate.

Configure the function handler as ``filegate.lambda_handler.handler``. The
function expects API Gateway REST proxy events, where the gateway has
already resolved ``resource`` (e.g. ``/v0/files/{id}``) and
``pathParameters``.

The runtime (configuration, object store, dispatcher and event loop) is
built on the first invocation and reused by warm invocations.
"""

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any

from filegate import metrics
from filegate.config import FileGateConfig, load_config_from_env
from filegate.dispatch import Dispatcher
from filegate.handlers import create_dispatcher
from filegate.handlers.files import FileContext
from filegate.logging_config import configure_logging
from filegate.models import Request
from filegate.storage import create_object_store
from filegate.storage.backend import ObjectStore

logger = logging.getLogger(__name__)


def request_from_event(event: Mapping[str, Any]) -> Request:
    """Translate an API Gateway proxy event into a dispatcher request."""
    request_context = event.get("requestContext") or {}
    return Request(
        resource=event.get("resource") or "",
        http_method=event.get("httpMethod") or "",
        path_parameters=dict(event.get("pathParameters") or {}),
        request_id=request_context.get("requestId", ""),
    )


class LambdaRuntime:
    """Process-wide resources for warm Lambda invocations.

    aiobotocore clients are bound to the event loop that created them, so
    the runtime owns one loop and runs every invocation on it.

    With ``observability.metrics`` enabled the dispatcher counters are
    registered in the process-wide Prometheus registry; there is no scrape
    endpoint in Lambda, so they are only visible to an in-process exporter.
    """

    def __init__(
        self,
        config: FileGateConfig,
        store: ObjectStore | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self.context = FileContext(
            store=store if store is not None else create_object_store(config.storage),
            environ=environ,
            default_container=config.storage.container,
        )
        self.dispatcher: Dispatcher = create_dispatcher(self.context)
        self.loop = asyncio.new_event_loop()
        if config.observability.metrics:
            metrics.init_metrics()

    @classmethod
    def from_environment(cls) -> "LambdaRuntime":
        config = load_config_from_env()
        configure_logging(config.logging)
        return cls(config)

    def invoke(self, event: Mapping[str, Any]) -> dict[str, Any]:
        """Handle one proxy event and return the proxy result."""
        request = request_from_event(event)
        start = time.monotonic()
        response = self.loop.run_until_complete(self.dispatcher.handle(request))
        duration_ms = round((time.monotonic() - start) * 1000, 2)
        logger.info(
            "%s %s %d %.2fms",
            request.http_method,
            request.resource,
            response.status_code,
            duration_ms,
            extra={
                "method": request.http_method,
                "resource": request.resource,
                "status": response.status_code,
                "duration_ms": duration_ms,
                "request_id": request.request_id or None,
            },
        )
        return response.to_proxy_result()

    def close(self) -> None:
        self.loop.run_until_complete(self.context.close())
        self.loop.close()


_runtime: LambdaRuntime | None = None


def get_runtime() -> LambdaRuntime:
    """Return the shared runtime, creating it on first use."""
    global _runtime
    if _runtime is None:
        _runtime = LambdaRuntime.from_environment()
        logger.info("FileGate Lambda runtime initialized: %s", _runtime.config.storage.backend)
    return _runtime


def handler(event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
    """Lambda handler for API Gateway REST proxy integrations."""
    return get_runtime().invoke(event)
