from typing import Any

from lilya.controllers import Controller
from lilya.requests import Request
from lilya.responses import Response

from bullscope import metrics


class MetricsController(Controller):
    async def get(self, request: Request) -> Any:
        payload, content_type = metrics.render_latest()
        return Response(payload, media_type=content_type)
