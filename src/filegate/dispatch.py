"""Route table and dispatcher for FileGate.

The dispatcher looks up a handler by resource template and HTTP method,
invokes it, and turns the outcome into a :class:`Response`. It is the only
failure boundary: it never raises to its caller.
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Awaitable, Protocol

from filegate import metrics
from filegate.errors import Failure, ObjectNotFound, UnhandledFailure, ValidationFailure
from filegate.models import Request, Response, error_response

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND = "route not found"
NO_SUCH_OBJECT = "no such object exists"
UNEXPECTED_ERROR = "Unexpected server error"


class Handler(Protocol):
    """A request handler: produce a response or a failure for a request."""

    def __call__(self, request: Request) -> Awaitable[Response | Failure]: ...


MethodMap = Mapping[str, Handler]
RouteTable = Mapping[str, MethodMap]


def build_route_table(routes: Mapping[str, Mapping[str, Handler]]) -> RouteTable:
    """Freeze a nested ``{resource: {method: handler}}`` mapping.

    Method names are upper-cased here; lookups in :meth:`Dispatcher.resolve`
    are exact, so a request method must arrive upper-case (as API Gateway and
    ASGI servers send it). Both levels are read-only views.
    """
    return MappingProxyType(
        {
            resource: MappingProxyType(
                {method.upper(): handler for method, handler in methods.items()}
            )
            for resource, methods in routes.items()
        }
    )


async def not_found(request: Request) -> Response:
    """Terminal handler for unmatched routes."""
    return error_response(404, ROUTE_NOT_FOUND)


def failure_to_response(failure: Failure, request: Request) -> Response:
    """Map a handler failure to its HTTP response.

    Unhandled failures are logged with their detail; the caller only ever
    sees the generic message.
    """
    if isinstance(failure, ValidationFailure):
        return error_response(400, failure.message)
    if isinstance(failure, ObjectNotFound):
        return error_response(404, NO_SUCH_OBJECT)

    exc = failure.exc
    logger.error(
        "Unhandled failure for %s %s: %s",
        request.http_method,
        request.resource,
        failure.detail,
        exc_info=(type(exc), exc, exc.__traceback__) if exc is not None else None,
        extra={
            "method": request.http_method,
            "resource": request.resource,
            "request_id": request.request_id or None,
        },
    )
    return error_response(500, UNEXPECTED_ERROR)


class Dispatcher:
    """Selects and invokes a handler for each request.

    Attributes:
        routes: The immutable route table.
    """

    def __init__(self, routes: RouteTable) -> None:
        self.routes = routes

    def resolve(self, request: Request) -> Handler:
        """Return the handler for ``request``, or :func:`not_found`.

        Resource and method are matched exactly (case-sensitive).
        """
        methods = self.routes.get(request.resource, {})
        return methods.get(request.http_method, not_found)

    async def handle(self, request: Request) -> Response:
        """Dispatch ``request`` and always return a response."""
        handler = self.resolve(request)
        try:
            outcome = await handler(request)
        except Exception as exc:
            outcome = UnhandledFailure(detail=f"{type(exc).__name__}: {exc}", exc=exc)

        if isinstance(outcome, Response):
            response = outcome
        else:
            response = failure_to_response(outcome, request)

        route = request.resource if request.resource in self.routes else "unmatched"
        metrics.record_request(route, request.http_method, response.status_code)
        return response
