from __future__ import annotations

from typing import Any

from lilya.requests import Request
from lilya.templating.controllers import TemplateController

from bullscope.contrib.dashboard.mixins import DashboardMixin, guarded
from bullscope.core.dependencies import get_settings
from bullscope.logging import logger


class QueueController(DashboardMixin, TemplateController):
    """
    The queue table. The home page polls it every few seconds through htmx.
    """

    template_name = "queues/queues.html"

    @guarded
    async def get(self, request: Request) -> Any:
        stats = await self.explorer.get_all_stats()
        logger.debug(f"Rendering stats for {len(stats)} queues")

        context = await super().get_context_data(request)
        context.update({"title": "Queues", "queues": stats})
        return await self.render_template(request, context=context)


class QueueDetailController(DashboardMixin, TemplateController):
    """
    Counts of a single queue with a preview of the jobs in each state.
    """

    template_name = "queues/info.html"

    @guarded
    async def get(self, request: Request) -> Any:
        name = request.path_params["name"]
        explorer = self.explorer
        limit = get_settings().preview_limit

        stat = await explorer.get_queue_stat(name)

        sections = []
        for collection in explorer.schema.collections:
            jobs = await explorer.get_jobs_by_state(name, collection.state, limit)
            sections.append(
                {
                    "state": str(collection.state),
                    "count": stat.counts[collection.kind],
                    "jobs": jobs,
                }
            )

        context = await super().get_context_data(request)
        context.update(
            {
                "title": f"Bullscope - {name}",
                "subtitle": f"Queue: {name}",
                "queue": name,
                "stat": stat,
                "sections": sections,
            }
        )
        return await self.render_template(request, context=context)
