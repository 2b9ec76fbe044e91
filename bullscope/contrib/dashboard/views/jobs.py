from __future__ import annotations

from typing import Any

from lilya.controllers import Controller
from lilya.requests import Request
from lilya.templating.controllers import TemplateController

from bullscope.contrib.dashboard.mixins import DashboardMixin, guarded, json_response, text_response
from bullscope.core.dependencies import get_settings


class JobListController(DashboardMixin, TemplateController):
    """
    Jobs of one queue in one state (or in every state with `state=all`),
    optionally filtered by a search query.
    """

    template_name = "jobs/jobs.html"

    @guarded
    async def get(self, request: Request) -> Any:
        queue = request.query_params.get("queue", "")
        state = request.query_params.get("state", "")
        query = request.query_params.get("q", "").strip()
        if not queue or not state:
            return text_response("queue and state parameters required", 400)

        try:
            limit = int(request.query_params.get("limit", get_settings().job_list_limit))
        except ValueError:
            limit = get_settings().job_list_limit

        jobs = await self.explorer.get_jobs_by_state(queue, state, limit, query or None)

        context = await super().get_context_data(request)
        context.update(
            {
                "title": f"Bullscope - {queue} ({state})",
                "subtitle": f"Queue: {queue}",
                "queue": queue,
                "state": state,
                "query": query,
                "limit": limit,
                "jobs": jobs,
                "states": ["all", *(str(s) for s in self.explorer.schema.states)],
            }
        )
        return await self.render_template(request, context=context)


class JobDetailController(DashboardMixin, Controller):
    @guarded
    async def get(self, request: Request) -> Any:
        queue = request.query_params.get("queue", "")
        job_id = request.query_params.get("id", "")
        if not queue or not job_id:
            return text_response("queue and id parameters required", 400)

        job = await self.explorer.get_job(queue, job_id)
        return json_response(job.to_dict())
