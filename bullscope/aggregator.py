from __future__ import annotations

from bullscope import metrics
from bullscope.classifier import classify_job_state
from bullscope.core.enums import ALL_STATES, JobState, ReadPolicy
from bullscope.core.keys import BULLMQ_SCHEMA, Collection, QueueKeys, Schema
from bullscope.exceptions import JobNotFound, StoreError, StoreUnavailable, UnknownState
from bullscope.jobs import Job, JobSummary, load_job
from bullscope.logging import logger
from bullscope.readers import read_page
from bullscope.stores.base import BaseStore


def parse_state(value: str, schema: Schema = BULLMQ_SCHEMA) -> JobState | str:
    """
    Normalizes a requested state. Accepts a job state ("waiting"), a
    collection kind ("wait") or the pseudo state "all".

    Raises:
        UnknownState: If the value is none of those.
    """
    normalized = (value or "").strip().lower()
    if normalized == ALL_STATES:
        return ALL_STATES
    for collection in schema.collections:
        if normalized == collection.kind:
            return collection.state
    try:
        state = JobState(normalized)
    except ValueError:
        raise UnknownState(value) from None
    if state == JobState.UNKNOWN:
        raise UnknownState(value)
    return state


async def _load(store: BaseStore, keys: QueueKeys, job_id: str) -> Job | None:
    """
    Loads one job for a listing. A job that vanished or could not be read is
    skipped; only an unreachable store propagates.
    """
    try:
        return await load_job(store, keys, job_id)
    except JobNotFound:
        logger.debug(f"Job {job_id} of queue '{keys.queue}' is referenced but has no hash; skipping.")
    except StoreUnavailable:
        raise
    except StoreError as exc:
        logger.warning(f"Could not load job {job_id} of queue '{keys.queue}': {exc}")
        metrics.record_error("load_job")
    return None


async def _page_ids(
    store: BaseStore,
    keys: QueueKeys,
    collection: Collection,
    limit: int,
    policy: ReadPolicy,
) -> list[str]:
    result = await read_page(store, keys, collection, limit)
    return result.resolve([], policy)


async def _summarize(
    store: BaseStore,
    keys: QueueKeys,
    job: Job,
    collection: Collection,
    schema: Schema,
) -> JobSummary:
    # A job listed under a collection it is no longer the earliest member of
    # reports the state it resolves to. The collection is the fallback when
    # the job left every collection between the two reads.
    resolved = await classify_job_state(store, keys, job.id, schema)
    return JobSummary.from_job(job, resolved if resolved != JobState.UNKNOWN else collection.state)


async def get_jobs_by_state(
    store: BaseStore,
    keys: QueueKeys,
    state: JobState | str,
    limit: int,
    schema: Schema = BULLMQ_SCHEMA,
    policy: ReadPolicy = ReadPolicy.DEGRADE,
    query: str | None = None,
) -> list[JobSummary]:
    """
    Lists up to `limit` jobs of one state in the collection's natural order.

    Each job is classified again, so a job that also sits in a collection of
    higher precedence is reported with that state. `state="all"` delegates to
    `get_jobs_across_states`.

    Args:
        state: A job state, a collection kind or "all".
        limit: How many IDs to read from the collection before filtering.
        query: Optional case-insensitive substring filter.

    Raises:
        UnknownState: If `state` is not recognized.
    """
    parsed = parse_state(str(state), schema)
    if parsed == ALL_STATES:
        return await get_jobs_across_states(store, keys, limit, schema, policy, query)

    collection = schema.collection_for(parsed)  # type: ignore[arg-type]
    if collection is None:
        # The layout has no such collection.
        return []

    summaries: list[JobSummary] = []
    for job_id in await _page_ids(store, keys, collection, limit, policy):
        job = await _load(store, keys, job_id)
        if job is None:
            continue
        summary = await _summarize(store, keys, job, collection, schema)
        if summary.matches(query):
            summaries.append(summary)
    return summaries


async def get_jobs_across_states(
    store: BaseStore,
    keys: QueueKeys,
    limit: int,
    schema: Schema = BULLMQ_SCHEMA,
    policy: ReadPolicy = ReadPolicy.DEGRADE,
    query: str | None = None,
) -> list[JobSummary]:
    """
    Lists jobs from every state collection, each job at most once.

    States are visited in precedence order and each contributes at most
    `limit` IDs. A job ID already seen in an earlier state is skipped. Each
    job is classified again, so it reports the earliest state holding it even
    when that collection was cut off by `limit`. When `query` is given,
    non-matching jobs are dropped after loading, which means the result can
    be shorter than `limit` even when more jobs exist.
    """
    seen: set[str] = set()
    summaries: list[JobSummary] = []
    for collection in schema.collections:
        for job_id in await _page_ids(store, keys, collection, limit, policy):
            if job_id in seen:
                continue
            seen.add(job_id)
            job = await _load(store, keys, job_id)
            if job is None:
                continue
            summary = await _summarize(store, keys, job, collection, schema)
            if summary.matches(query):
                summaries.append(summary)
    return summaries
