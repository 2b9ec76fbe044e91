from typing import TYPE_CHECKING

__version__ = "0.1.0"

from bullscope.monkay import create_monkay

if TYPE_CHECKING:
    from .conf.global_settings import Settings
    from .explorer import Explorer
    from .jobs import Job, JobSummary
    from .stats import QueueStats
    from .stores.base import BaseStore
    from .stores.memory import InMemoryStore
    from .stores.redis_store import RedisStore

monkay = create_monkay(globals())

__all__ = [
    "BaseStore",
    "Explorer",
    "InMemoryStore",
    "Job",
    "JobSummary",
    "QueueStats",
    "RedisStore",
    "Settings",
]
