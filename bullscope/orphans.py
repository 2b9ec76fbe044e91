from __future__ import annotations

from bullscope.core.enums import ReadPolicy
from bullscope.core.keys import JOB_SIGNATURE_FIELD, RESERVED_SUFFIXES, QueueKeys, Schema
from bullscope.core.results import attempt
from bullscope.readers import read_ids
from bullscope.stores.base import BaseStore


async def collect_referenced_ids(
    store: BaseStore,
    keys: QueueKeys,
    schema: Schema,
    policy: ReadPolicy = ReadPolicy.DEGRADE,
) -> set[str]:
    """
    Returns the union of the job IDs held by every state collection of a
    queue. A collection that cannot be read contributes nothing under
    `ReadPolicy.DEGRADE`.

    The result describes the store at the time of the call only and must not
    be reused across requests.
    """
    referenced: set[str] = set()
    for collection in schema.collections:
        result = await read_ids(store, keys, collection)
        referenced.update(result.resolve([], policy))
    return referenced


async def is_job_hash(store: BaseStore, key: str) -> bool:
    """
    A key holds a job record when it is a hash carrying a `name` field.
    Keys whose type or field cannot be read are not counted.
    """
    key_type = await attempt(store.key_type, key, operation="type")
    if not key_type.ok or key_type.value != "hash":
        return False
    has_name = await attempt(store.hexists, key, JOB_SIGNATURE_FIELD, operation="hexists")
    return bool(has_name.resolve(False))


async def count_job_hashes(store: BaseStore, keys: QueueKeys, count: int = 100) -> int:
    """
    Counts the job hashes of a queue with a full scan of `prefix:queue:*`.

    Collection and metadata keys are skipped by suffix. This walks the whole
    namespace on every call: the store has no index of job hashes.
    """
    seen: set[str] = set()
    async for key in store.scan_keys(keys.scan_pattern, count):
        if key in seen or keys.suffix(key) in RESERVED_SUFFIXES:
            continue
        seen.add(key)

    total = 0
    for key in seen:
        if await is_job_hash(store, key):
            total += 1
    return total


async def count_orphans(
    store: BaseStore,
    keys: QueueKeys,
    schema: Schema,
    policy: ReadPolicy = ReadPolicy.DEGRADE,
    referenced: set[str] | None = None,
    count: int = 100,
) -> int:
    """
    Counts job hashes that no state collection references.

    The result is `max(0, job hashes - distinct referenced IDs)`: reads are
    not transactional, so the referenced set can outgrow the scan while jobs
    move, and the count is clamped rather than going negative.

    Args:
        referenced: The referenced ID set when the caller already holds one
            from the same request.
    """
    if referenced is None:
        referenced = await collect_referenced_ids(store, keys, schema, policy)
    hashes = await count_job_hashes(store, keys, count)
    return max(0, hashes - len(referenced))
