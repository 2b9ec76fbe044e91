from __future__ import annotations

import functools
import json
from typing import Any, Awaitable, Callable

import anyio
from lilya.requests import Request
from lilya.responses import Response

from bullscope.contrib.dashboard.engine import templates
from bullscope.core.dependencies import get_explorer, get_settings
from bullscope.exceptions import JobNotFound, StoreError, StoreUnavailable, UnknownState
from bullscope.explorer import Explorer
from bullscope.logging import logger


def text_response(content: str, status_code: int = 200) -> Response:
    return Response(content.encode("utf-8"), status_code=status_code, media_type="text/plain")


def json_response(payload: Any, status_code: int = 200) -> Response:
    return Response(
        json.dumps(payload, default=str).encode("utf-8"),
        status_code=status_code,
        media_type="application/json",
    )


def guarded(handler: Callable[..., Awaitable[Response]]) -> Callable[..., Awaitable[Response]]:
    """
    Runs a controller method under the request deadline and turns bullscope
    errors into responses: 400 for an unknown state, 404 for a missing job,
    503 when the store is unreachable, 500 for any other store error and 504
    when the deadline expires.
    """

    @functools.wraps(handler)
    async def wrapper(self: Any, request: Request, *args: Any, **kwargs: Any) -> Response:
        try:
            with anyio.fail_after(get_settings().request_timeout):
                return await handler(self, request, *args, **kwargs)
        except UnknownState as exc:
            return text_response(str(exc), 400)
        except JobNotFound as exc:
            return text_response(str(exc), 404)
        except StoreUnavailable as exc:
            logger.error(f"{request.url.path}: store unavailable: {exc}")
            return text_response(f"Store unavailable: {exc}", 503)
        except StoreError as exc:
            logger.error(f"{request.url.path}: store error: {exc}")
            return text_response(f"Store error: {exc}", 500)
        except TimeoutError:
            logger.error(f"{request.url.path}: timed out")
            return text_response("Request timed out", 504)

    return wrapper


class DashboardMixin:
    templates = templates

    @property
    def explorer(self) -> Explorer:
        return get_explorer()

    def is_fragment(self, request: Request) -> bool:
        return bool(request.headers.get("HX-Request"))

    async def get_context_data(self, request: Request, **kwargs: Any) -> dict:
        settings = get_settings()
        context = {}
        context.update(
            {
                "title": "Bullscope",
                "header_text": "Bullscope Explorer",
                "subtitle": "",
                "version": settings.version,
                "prefix": settings.queue_prefix,
                "layout": "fragment.html" if self.is_fragment(request) else "base.html",
            }
        )
        context.update(kwargs)
        return context
