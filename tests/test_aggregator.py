import pytest

from bullscope.aggregator import get_jobs_across_states, get_jobs_by_state, parse_state
from bullscope.core.enums import ALL_STATES, JobState, ReadPolicy
from bullscope.core.keys import LEGACY_SCHEMA, QueueKeys
from bullscope.exceptions import StoreError, StoreUnavailable, UnknownState
from bullscope.stores.memory import InMemoryStore

keys = QueueKeys("bull", "orders")


def test_parse_state():
    assert parse_state("waiting") == JobState.WAITING
    assert parse_state("wait") == JobState.WAITING
    assert parse_state(" Failed ") == JobState.FAILED
    assert parse_state("waiting-children") == JobState.WAITING_CHILDREN
    assert parse_state("all") == ALL_STATES


@pytest.mark.parametrize("value", ["bogus", "unknown", ""])
def test_parse_state_rejects(value):
    with pytest.raises(UnknownState):
        parse_state(value)


@pytest.mark.asyncio
async def test_waiting_with_limit(orders_store):
    jobs = await get_jobs_by_state(orders_store, keys, "waiting", 2)

    assert [job.id for job in jobs] == ["1", "2"]
    assert all(job.state == JobState.WAITING for job in jobs)
    assert jobs[0].name == "charge"
    assert jobs[0].queue == "orders"


@pytest.mark.asyncio
async def test_listing_reclassifies_jobs(orders_store):
    jobs = await get_jobs_by_state(orders_store, keys, JobState.COMPLETED, 10)

    assert [(job.id, job.state) for job in jobs] == [("5", JobState.FAILED), ("7", JobState.COMPLETED)]


@pytest.mark.asyncio
async def test_empty_state(orders_store):
    assert await get_jobs_by_state(orders_store, keys, "paused", 10) == []


@pytest.mark.asyncio
async def test_state_missing_from_layout(store):
    store.zadd("bull:orders:prioritized", {"1": 1})
    assert await get_jobs_by_state(store, keys, "prioritized", 10, schema=LEGACY_SCHEMA) == []


@pytest.mark.asyncio
async def test_unknown_state_raises(orders_store):
    with pytest.raises(UnknownState):
        await get_jobs_by_state(orders_store, keys, "bogus", 10)


@pytest.mark.asyncio
async def test_referenced_job_without_hash_is_skipped(orders_store):
    orders_store.rpush("bull:orders:wait", "ghost")
    jobs = await get_jobs_by_state(orders_store, keys, "waiting", 10)
    assert [job.id for job in jobs] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_across_states_deduplicates(orders_store):
    jobs = await get_jobs_across_states(orders_store, keys, 100)

    assert [job.id for job in jobs] == ["4", "1", "2", "3", "5", "6", "7", "8"]
    states = {job.id: job.state for job in jobs}
    assert states["5"] == JobState.FAILED
    assert states["4"] == JobState.ACTIVE
    assert states["8"] == JobState.DELAYED


@pytest.mark.asyncio
async def test_all_delegates_to_across_states(orders_store):
    by_all = await get_jobs_by_state(orders_store, keys, "all", 100)
    assert [job.id for job in by_all] == ["4", "1", "2", "3", "5", "6", "7", "8"]


@pytest.mark.asyncio
async def test_limit_applies_per_state(orders_store):
    jobs = await get_jobs_across_states(orders_store, keys, 1)
    # One ID per collection; completed's first ID (5) was already seen.
    assert [job.id for job in jobs] == ["4", "1", "5", "8"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "query, expected",
    [
        ("TIMEOUT", ["6"]),
        ("abc-123", ["2"]),
        ("remind", ["8"]),
        ("attempts", ["4", "1", "2", "3", "5", "6", "7", "8"]),
        ("no such thing", []),
    ],
)
async def test_search(orders_store, query, expected):
    jobs = await get_jobs_across_states(orders_store, keys, 100, query=query)
    assert [job.id for job in jobs] == expected


@pytest.mark.asyncio
async def test_search_within_state(orders_store):
    jobs = await get_jobs_by_state(orders_store, keys, "failed", 10, query="declined")
    assert [job.id for job in jobs] == ["5"]


@pytest.mark.asyncio
async def test_legacy_layout(store, job_factory):
    store.rpush("bull:orders:wait", "1")
    store.sadd("bull:orders:failed", "2")
    store.sadd("bull:orders:completed", "2", "3")
    for job_id in ("1", "2", "3"):
        job_factory(store, "orders", job_id)

    jobs = await get_jobs_across_states(store, keys, 10, schema=LEGACY_SCHEMA)
    assert [(job.id, job.state) for job in jobs] == [
        ("1", JobState.WAITING),
        ("2", JobState.FAILED),
        ("3", JobState.COMPLETED),
    ]


class BrokenHashStore(InMemoryStore):
    async def hgetall(self, key):
        if key.endswith(":2"):
            raise StoreError("WRONGTYPE")
        return await super().hgetall(key)


class DownHashStore(InMemoryStore):
    async def hgetall(self, key):
        raise StoreUnavailable("connection reset")


@pytest.mark.asyncio
async def test_unreadable_job_is_skipped(job_factory):
    store = BrokenHashStore()
    store.rpush("bull:orders:wait", "1", "2")
    job_factory(store, "orders", "1")
    job_factory(store, "orders", "2")

    jobs = await get_jobs_by_state(store, keys, "waiting", 10)
    assert [job.id for job in jobs] == ["1"]


@pytest.mark.asyncio
async def test_unavailable_store_propagates_from_listing(job_factory):
    store = DownHashStore()
    store.rpush("bull:orders:wait", "1")
    with pytest.raises(StoreUnavailable):
        await get_jobs_by_state(store, keys, "waiting", 10)


@pytest.mark.asyncio
async def test_fail_fast_listing(orders_store):
    orders_store.set("bull:orders:paused", "oops")

    assert [job.id for job in await get_jobs_by_state(orders_store, keys, "paused", 10)] == []
    with pytest.raises(StoreError):
        await get_jobs_by_state(orders_store, keys, "paused", 10, policy=ReadPolicy.FAIL_FAST)


@pytest.mark.asyncio
async def test_across_states_reports_resolved_state_past_page(store, job_factory):
    # Job 3 sits in both active and failed; the active page stops at 2 IDs,
    # so it is first listed from failed while still being active.
    store.rpush("bull:orders:active", "1", "2", "3")
    store.zadd("bull:orders:failed", {"3": 1})
    for job_id in ("1", "2", "3"):
        job_factory(store, "orders", job_id)

    jobs = await get_jobs_across_states(store, keys, 2)

    assert [(job.id, job.state) for job in jobs] == [
        ("1", JobState.ACTIVE),
        ("2", JobState.ACTIVE),
        ("3", JobState.ACTIVE),
    ]


@pytest.mark.asyncio
async def test_listing_survives_non_finite_timestamp(store, job_factory):
    store.rpush("bull:orders:wait", "1", "2", "3")
    for job_id in ("1", "3"):
        job_factory(store, "orders", job_id)
    job_factory(store, "orders", "2", timestamp="inf")

    jobs = await get_jobs_by_state(store, keys, "waiting", 10)

    assert [job.id for job in jobs] == ["1", "2", "3"]
    assert jobs[1].timestamp.year == 1970
