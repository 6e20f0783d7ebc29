"""Prometheus metrics definitions for s3bridge.

All custom metrics use the ``s3bridge_`` prefix. These are
*application-level* operation metrics; ``prometheus-fastapi-instrumentator``
provides the HTTP-level ones (request count, duration, sizes).

Counters reset to zero on restart.
"""

from __future__ import annotations

from prometheus_client import Counter

# Flag indicating whether metrics have been initialised via init_metrics().
_initialized: bool = False

# labels: operation, status
operations_total: Counter | None = None

bytes_received_total: Counter | None = None
bytes_sent_total: Counter | None = None


def init_metrics() -> None:
    """Create and register all Prometheus metrics.

    Called once when metrics are enabled. When metrics are disabled in
    config the module-level references stay ``None`` and no collectors are
    registered in the global registry.
    """
    global _initialized
    global operations_total, bytes_received_total, bytes_sent_total

    if _initialized:
        return

    operations_total = Counter(
        "s3bridge_operations_total",
        "Total gateway operations by type and outcome",
        ["operation", "status"],
    )

    bytes_received_total = Counter(
        "s3bridge_bytes_received_total",
        "Total bytes received in request bodies",
    )

    bytes_sent_total = Counter(
        "s3bridge_bytes_sent_total",
        "Total bytes sent in response bodies",
    )

    _initialized = True


def record_operation(operation: str, status: int) -> None:
    """Count one finished operation. No-op when metrics are disabled."""
    if operations_total is not None:
        operations_total.labels(operation=operation, status=str(status)).inc()
