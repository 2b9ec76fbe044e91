"""Prometheus metrics exported by bullscope.

All metric objects are registered at import time on the default registry.
Queue gauges are refreshed whenever queue statistics are computed, either by
a request or by the background poller.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

from bullscope.exceptions import StoreError

if TYPE_CHECKING:
    from bullscope.stats import QueueStats


def _queue_gauge(state: str, description: str) -> Gauge:
    return Gauge(f"bullmq_queue_{state}_total", description, ["queue"])


QUEUE_GAUGES: dict[str, Gauge] = {
    "wait": _queue_gauge("waiting", "Number of jobs waiting in queue"),
    "active": _queue_gauge("active", "Number of jobs currently being processed"),
    "paused": _queue_gauge("paused", "Number of jobs in the paused list"),
    "prioritized": _queue_gauge("prioritized", "Number of prioritized jobs"),
    "waiting-children": _queue_gauge("waiting_children", "Number of jobs waiting for children"),
    "failed": _queue_gauge("failed", "Number of failed jobs in queue"),
    "completed": _queue_gauge("completed", "Number of completed jobs in queue"),
    "delayed": _queue_gauge("delayed", "Number of delayed jobs in queue"),
    "stalled": _queue_gauge("stalled", "Number of stalled jobs in queue"),
    "orphaned": _queue_gauge("orphaned", "Number of orphaned job hashes not in any state list"),
}

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path", "status"],
)

redis_operation_duration_seconds = Histogram(
    "redis_operation_duration_seconds",
    "Redis operation latency",
    ["operation"],
)

redis_operation_errors_total = Counter(
    "redis_operation_errors_total",
    "Total number of Redis operation errors",
    ["operation"],
)


def record_queue_stats(stats: QueueStats) -> None:
    """
    Sets every queue gauge from a freshly computed `QueueStats`.
    """
    for kind, count in stats.counts.items():
        gauge = QUEUE_GAUGES.get(kind)
        if gauge is not None:
            gauge.labels(queue=stats.name).set(count)
    QUEUE_GAUGES["orphaned"].labels(queue=stats.name).set(stats.orphaned)


def record_error(operation: str) -> None:
    redis_operation_errors_total.labels(operation=operation).inc()


@contextmanager
def track(operation: str) -> Iterator[None]:
    """
    Observes the duration of `operation`. A store error escaping the block
    also increments the error counter before propagating.
    """
    start = time.perf_counter()
    try:
        yield
    except StoreError:
        record_error(operation)
        raise
    finally:
        redis_operation_duration_seconds.labels(operation=operation).observe(time.perf_counter() - start)


def normalize_path(path: str) -> str | None:
    """
    Collapses request paths into a bounded set of labels. Paths outside the
    dashboard return None and are not observed.
    """
    if path in ("/", "/queues", "/queue/jobs", "/job/detail", "/metrics"):
        return path
    if path.startswith("/queue/"):
        return "/queue/:name"
    if path in ("/health", "/healthz"):
        return "/health"
    if path in ("/ready", "/readyz"):
        return "/ready"
    return None


def observe_request(method: str, path: str, status: int, seconds: float) -> None:
    label = normalize_path(path)
    if label is None:
        return
    http_request_duration_seconds.labels(method=method, path=label, status=str(status)).observe(seconds)


def render_latest() -> tuple[bytes, str]:
    """
    Returns the exposition payload and its content type.
    """
    return generate_latest(), CONTENT_TYPE_LATEST
