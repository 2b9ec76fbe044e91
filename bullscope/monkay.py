from __future__ import annotations

import os
from typing import Any

from monkay import Monkay


def create_monkay(global_dict: dict) -> Any:
    monkay: Monkay = Monkay[None, Any](
        global_dict,
        settings_path=lambda: os.environ.get(
            "BULLSCOPE_SETTINGS_MODULE", "bullscope.conf.global_settings.Settings"
        )
        or "",
        lazy_imports={
            "settings": lambda: monkay.settings,
            "BaseStore": "bullscope.stores.base.BaseStore",
            "Explorer": "bullscope.explorer.Explorer",
            "InMemoryStore": "bullscope.stores.memory.InMemoryStore",
            "Job": "bullscope.jobs.Job",
            "JobSummary": "bullscope.jobs.JobSummary",
            "QueueStats": "bullscope.stats.QueueStats",
            "RedisStore": "bullscope.stores.redis_store.RedisStore",
            "Settings": "bullscope.conf.global_settings.Settings",
        },
        skip_all_update=True,
        package="bullscope",
    )
    return monkay
