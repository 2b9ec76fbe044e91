from __future__ import annotations

from bullscope.core.enums import ReadPolicy, Structure
from bullscope.core.keys import Collection, QueueKeys, Schema
from bullscope.core.results import ReadResult, attempt
from bullscope.stores.base import BaseStore, range_slice


async def read_count(store: BaseStore, keys: QueueKeys, collection: Collection) -> ReadResult[int]:
    """
    Reads the size of one state collection with the command matching its
    Redis type.
    """
    key = keys.collection(collection.kind)
    if collection.structure == Structure.LIST:
        return await attempt(store.llen, key, operation="llen")
    if collection.structure == Structure.ZSET:
        return await attempt(store.zcard, key, operation="zcard")
    return await attempt(store.scard, key, operation="scard")


async def read_counts(
    store: BaseStore,
    keys: QueueKeys,
    schema: Schema,
    policy: ReadPolicy = ReadPolicy.DEGRADE,
) -> dict[str, int]:
    """
    Reads the size of every state collection of a queue.

    Each read is independent: under `ReadPolicy.DEGRADE` a collection whose
    read fails counts as zero and the others are still read.

    Returns:
        A mapping of collection kind (e.g. "wait", "failed") to its size.
    """
    counts: dict[str, int] = {}
    for collection in schema.collections:
        result = await read_count(store, keys, collection)
        counts[collection.kind] = result.resolve(0, policy)
    return counts


async def read_ids(
    store: BaseStore,
    keys: QueueKeys,
    collection: Collection,
    start: int = 0,
    stop: int = -1,
) -> ReadResult[list[str]]:
    """
    Reads the job IDs of one collection between `start` and `stop`
    (inclusive) in its natural order: list order for lists, ascending score
    for sorted sets. Plain sets have no order and are sorted by ID.
    """
    key = keys.collection(collection.kind)
    if collection.structure == Structure.LIST:
        return await attempt(store.lrange, key, start, stop, operation="lrange")
    if collection.structure == Structure.ZSET:
        return await attempt(store.zrange, key, start, stop, operation="zrange")

    result = await attempt(store.smembers, key, operation="smembers")
    if not result.ok:
        return ReadResult(value=None, ok=False, error=result.error)
    members = sorted(result.value or ())
    return ReadResult(value=members[range_slice(len(members), start, stop)], ok=True)


async def read_page(
    store: BaseStore,
    keys: QueueKeys,
    collection: Collection,
    limit: int,
) -> ReadResult[list[str]]:
    """
    Reads at most `limit` job IDs from the head of a collection.
    """
    if limit <= 0:
        return ReadResult(value=[], ok=True)
    return await read_ids(store, keys, collection, 0, limit - 1)


async def is_member(
    store: BaseStore,
    keys: QueueKeys,
    collection: Collection,
    job_id: str,
) -> ReadResult[bool]:
    """
    Checks whether `job_id` is in a collection: LPOS for lists, ZSCORE for
    sorted sets, SISMEMBER for sets.
    """
    key = keys.collection(collection.kind)
    if collection.structure == Structure.LIST:
        result = await attempt(store.lpos, key, job_id, operation="lpos")
    elif collection.structure == Structure.ZSET:
        result = await attempt(store.zscore, key, job_id, operation="zscore")
    else:
        return await attempt(store.sismember, key, job_id, operation="sismember")

    if not result.ok:
        return ReadResult(value=None, ok=False, error=result.error)
    return ReadResult(value=result.value is not None, ok=True)
