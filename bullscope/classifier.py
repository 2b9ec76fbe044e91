from __future__ import annotations

from bullscope.core.enums import JobState
from bullscope.core.keys import BULLMQ_SCHEMA, QueueKeys, Schema
from bullscope.readers import is_member
from bullscope.stores.base import BaseStore


async def classify_job_state(
    store: BaseStore,
    keys: QueueKeys,
    job_id: str,
    schema: Schema = BULLMQ_SCHEMA,
) -> JobState:
    """
    Resolves the single state a job is in.

    Collections are checked in the precedence order of `schema` and the first
    one holding the ID wins, so a job caught mid-transition in two
    collections always resolves the same way (e.g. `failed` before
    `completed`). A membership read that fails counts as "not in this
    collection".

    Returns:
        The state of the first collection containing `job_id`, or
        `JobState.UNKNOWN` when none does.
    """
    for collection in schema.collections:
        result = await is_member(store, keys, collection, job_id)
        if result.resolve(False):
            return collection.state
    return JobState.UNKNOWN
