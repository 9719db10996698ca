"""Request and response models shared by the dispatcher and its adapters."""

import json
from dataclasses import dataclass, field
from typing import Any

JSON_HEADERS = {"content-type": "application/json"}


@dataclass(frozen=True)
class Request:
    """A routed request as seen by the dispatcher.

    Attributes:
        resource: The resource path template, e.g. ``/v0/files/{id}``.
        http_method: Upper-case HTTP method name.
        path_parameters: Placeholder name to value mapping.
        request_id: Correlation id for logging.
    """

    resource: str
    http_method: str
    path_parameters: dict[str, str] = field(default_factory=dict)
    request_id: str = ""


@dataclass(frozen=True)
class Response:
    """An HTTP response with a string body."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    def to_proxy_result(self) -> dict[str, Any]:
        """Render as an API Gateway proxy integration result."""
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
        }


def json_response(status_code: int, payload: Any) -> Response:
    """Build a JSON response with ``content-type: application/json``."""
    return Response(
        status_code=status_code,
        headers=dict(JSON_HEADERS),
        body=json.dumps(payload),
    )


def error_response(status_code: int, message: str) -> Response:
    """Build a ``{"error": message}`` JSON response."""
    return json_response(status_code, {"error": message})


def empty_response() -> Response:
    """204 No Content with an empty body."""
    return Response(status_code=204, headers={}, body="")


def text_response(body: str) -> Response:
    """200 with a raw passthrough body and an empty content type."""
    return Response(status_code=200, headers={"content-type": ""}, body=body)
