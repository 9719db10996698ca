"""Prometheus metrics definitions for FileGate.

All custom metrics use the ``filegate_`` prefix. The dispatcher counts
every request it answers, labelled by resource template, method and status
code. HTTP-level metrics (durations, sizes) come from
``prometheus-fastapi-instrumentator`` when running as a web service.

Counters reset to zero on restart.
"""

from __future__ import annotations

from prometheus_client import Counter

# Flag indicating whether metrics have been initialised via init_metrics().
_initialized: bool = False

# ---------------------------------------------------------------------------
# Dispatcher counters  (labels: route, method, status)
# ---------------------------------------------------------------------------
requests_total: Counter | None = None
unhandled_failures_total: Counter | None = None


def init_metrics() -> None:
    """Create and register all FileGate metrics.

    Safe to call more than once. When metrics are disabled the module-level
    references stay ``None`` and nothing is registered in the global
    registry.
    """
    global _initialized, requests_total, unhandled_failures_total

    if _initialized:
        return

    requests_total = Counter(
        "filegate_requests_total",
        "Total dispatched requests by route, method and status code",
        ["route", "method", "status"],
    )

    unhandled_failures_total = Counter(
        "filegate_unhandled_failures_total",
        "Requests answered with 500 Unexpected server error",
        ["route", "method"],
    )

    _initialized = True


def record_request(route: str, method: str, status: int) -> None:
    """Count one dispatched request. No-op when metrics are disabled."""
    if requests_total is None:
        return
    requests_total.labels(route=route, method=method, status=str(status)).inc()
    if status >= 500 and unhandled_failures_total is not None:
        unhandled_failures_total.labels(route=route, method=method).inc()
