"""Logging setup for FileGate.

Both entry points log one line per request. The HTTP middleware and the
Lambda runtime attach the request context as ``extra`` fields, and the
dispatcher does the same for unhandled failures. The formatters below
render that context either inline (text) or as JSON keys.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TextIO

from filegate.config import LoggingConfig

# Request context attached via ``extra=`` by server, lambda_handler and dispatch.
REQUEST_FIELDS = ("request_id", "method", "resource", "path", "status", "duration_ms")

# Third-party loggers that are noisy at INFO/DEBUG.
_LIBRARY_LOGGERS = ("botocore", "aiobotocore", "urllib3")


def request_context(record: logging.LogRecord) -> dict:
    """Return the request fields present on ``record``."""
    return {
        field: getattr(record, field)
        for field in REQUEST_FIELDS
        if getattr(record, field, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, message, request fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(request_context(record))
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines, tagged with ``[request_id]`` when one is known."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s%(request_tag)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        request_id = getattr(record, "request_id", None)
        record.request_tag = f" [{request_id}]" if request_id else ""
        return super().format(record)


def configure_logging(config: LoggingConfig, stream: TextIO | None = None) -> logging.Handler:
    """Install a single root handler built from the ``logging`` config section.

    Replaces any handlers already on the root logger (the Lambda runtime
    installs its own). AWS client libraries are held at WARNING unless
    DEBUG is requested.

    Returns:
        The installed handler.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(JSONFormatter() if config.format == "json" else TextFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)

    return handler
