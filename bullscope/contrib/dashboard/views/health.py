from typing import Any

import anyio
from lilya.controllers import Controller
from lilya.requests import Request

from bullscope.contrib.dashboard.mixins import text_response
from bullscope.core.dependencies import get_explorer, get_settings
from bullscope.exceptions import BullscopeException
from bullscope.logging import logger


class HealthController(Controller):
    async def get(self, request: Request) -> Any:
        return text_response("OK")


class ReadyController(Controller):
    """
    Ready once queue discovery succeeds against the store within the request
    deadline.
    """

    async def get(self, request: Request) -> Any:
        timeout = get_settings().request_timeout
        try:
            with anyio.fail_after(timeout):
                await get_explorer().discover_queues()
        except BullscopeException as exc:
            return text_response(f"Store unavailable: {exc}", 503)
        except TimeoutError:
            logger.warning(f"Readiness check timed out after {timeout:g}s.")
            return text_response(f"Store unavailable: no answer within {timeout:g}s", 503)
        return text_response("Ready")
