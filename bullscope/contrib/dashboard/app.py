from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import anyio
from lilya.apps import Lilya
from lilya.middleware import DefineMiddleware
from lilya.requests import Request
from lilya.routing import RoutePath

from bullscope.conf import settings
from bullscope.contrib.dashboard.engine import templates
from bullscope.contrib.dashboard.middleware import HTTPMetricsMiddleware
from bullscope.contrib.dashboard.views import health, home, jobs, metrics, queues
from bullscope.core.dependencies import get_default_store, get_explorer, get_store
from bullscope.exceptions import StoreUnavailable
from bullscope.logging import logger
from bullscope.poller import MetricsPoller
from bullscope.stores.base import BaseStore


async def not_found(request: Request, exc: Exception) -> Any:
    return templates.get_template_response(
        request,
        "404.html",
        context={"title": "Not Found", "header_text": "Bullscope Explorer", "path": request.url.path},
        status_code=404,
    )


routes = [
    # Home / shell page polling the queue table
    RoutePath("/", home.DashboardController, methods=["GET"], name="dashboard"),

    # Queue table & detail
    RoutePath("/queues", queues.QueueController, methods=["GET"], name="queues"),
    # Registered before /queue/{name} so "jobs" is not taken for a queue name
    RoutePath("/queue/jobs", jobs.JobListController, methods=["GET"], name="queue-jobs"),
    RoutePath("/queue/{name}", queues.QueueDetailController, methods=["GET"], name="queue-detail"),

    # Single job as JSON
    RoutePath("/job/detail", jobs.JobDetailController, methods=["GET"], name="job-detail"),

    # Health checks
    RoutePath("/health", health.HealthController, methods=["GET"], name="health"),
    RoutePath("/healthz", health.HealthController, methods=["GET"], name="healthz"),
    RoutePath("/ready", health.ReadyController, methods=["GET"], name="ready"),
    RoutePath("/readyz", health.ReadyController, methods=["GET"], name="readyz"),

    # Prometheus exposition
    RoutePath("/metrics", metrics.MetricsController, methods=["GET"], name="metrics"),
]


async def check_store(store: BaseStore, timeout: float) -> None:
    """
    Fails unless the store answers PING within `timeout` seconds.

    Raises:
        StoreUnavailable: If the store is unreachable, too slow or does not
            acknowledge the PING.
    """
    try:
        with anyio.fail_after(timeout):
            answered = await store.ping()
    except TimeoutError:
        raise StoreUnavailable(f"no answer to PING within {timeout:g}s") from None
    if not answered:
        raise StoreUnavailable("PING was not acknowledged")


@asynccontextmanager
async def lifespan(app: Any) -> AsyncIterator[None]:
    """
    Refuses to start when the store does not answer, runs the metrics poller
    for as long as the application is up and closes the store on shutdown.
    """
    store = get_store()
    try:
        try:
            await check_store(store, settings.startup_ping_timeout)
        except StoreUnavailable as exc:
            logger.error(f"Store check failed on startup: {exc}")
            raise
        logger.info(f"Connected to {store!r}.")

        if not settings.metrics_poll_enabled:
            yield
            return

        poller = MetricsPoller(get_explorer(), settings.metrics_poll_seconds)
        async with anyio.create_task_group() as tg:
            tg.start_soon(poller.run)
            try:
                yield
            finally:
                tg.cancel_scope.cancel()
                logger.debug("Metrics poller cancelled on shutdown.")
    finally:
        await store.close()
        # A closed client must not be handed out again.
        get_default_store.cache_clear()
        logger.debug("Store closed on shutdown.")


def create_dashboard_app() -> Lilya:
    return Lilya(
        debug=settings.debug,
        routes=routes,
        exception_handlers={404: not_found},
        middleware=[DefineMiddleware(HTTPMetricsMiddleware)],
        lifespan=lifespan,
    )


app = create_dashboard_app()
