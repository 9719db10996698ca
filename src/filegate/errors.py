"""Failure variants returned by FileGate request handlers.

Handlers return either a :class:`~filegate.models.Response` or one of the
three failure variants below. The dispatcher is the only place that turns a
failure into an HTTP response.
"""

from dataclasses import dataclass
from typing import TypeGuard


@dataclass(frozen=True)
class ValidationFailure:
    """Client input error. Always rendered as 400 with ``message`` verbatim.

    Attributes:
        message: User-facing description of the invalid input.
    """

    message: str


@dataclass(frozen=True)
class ObjectNotFound:
    """The requested object key does not exist in the container.

    Attributes:
        key: The missing object key (never exposed to the caller).
    """

    key: str = ""


@dataclass(frozen=True)
class UnhandledFailure:
    """Anything else: misconfiguration or an unexpected store error.

    Attributes:
        detail: Operator-facing description, logged and never returned.
        exc: The originating exception, if any.
    """

    detail: str
    exc: BaseException | None = None


Failure = ValidationFailure | ObjectNotFound | UnhandledFailure


def is_failure(value: object) -> TypeGuard[Failure]:
    """Return True if ``value`` is one of the failure variants."""
    return isinstance(value, (ValidationFailure, ObjectNotFound, UnhandledFailure))
