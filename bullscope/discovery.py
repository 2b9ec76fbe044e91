from __future__ import annotations

from bullscope.core.keys import queue_name_from_key, sentinel_pattern
from bullscope.stores.base import BaseStore


async def discover_queues(store: BaseStore, prefix: str, count: int = 10) -> list[str]:
    """
    Finds every queue namespace under `prefix` by scanning for the
    `prefix:<queue>:id` keys that each queue creates when it hands out its
    first job ID. Queues that never assigned an ID are not found.

    The whole scan completes before anything is returned: a store error
    part-way through propagates and no partial list is produced.

    Args:
        store: The store to scan.
        prefix: The key prefix shared by the queues, usually "bull".
        count: The SCAN COUNT hint.

    Returns:
        The queue names, deduplicated, in the order they were first seen.
        Empty when there are none.
    """
    seen: dict[str, None] = {}
    async for key in store.scan_keys(sentinel_pattern(prefix), count):
        name = queue_name_from_key(prefix, key)
        if name:
            seen.setdefault(name, None)
    return list(seen)
