import pytest

from bullscope.core.enums import ReadPolicy
from bullscope.core.keys import BULLMQ_SCHEMA, LEGACY_SCHEMA, QueueKeys
from bullscope.core.results import ReadResult, attempt, get_read_policy
from bullscope.exceptions import ImproperlyConfigured, StoreError, StoreUnavailable
from bullscope.readers import is_member, read_counts, read_ids, read_page
from bullscope.stores.memory import InMemoryStore

keys = QueueKeys("bull", "orders")


class FlakyStore(InMemoryStore):
    """Fails every ZCARD/ZRANGE on the failed collection."""

    async def zcard(self, key):
        if key.endswith(":failed"):
            raise StoreError("LOADING Redis is loading the dataset in memory")
        return await super().zcard(key)

    async def zrange(self, key, start, stop):
        if key.endswith(":failed"):
            raise StoreError("LOADING Redis is loading the dataset in memory")
        return await super().zrange(key, start, stop)


class DownStore(InMemoryStore):
    async def llen(self, key):
        raise StoreUnavailable("connection refused")


@pytest.mark.asyncio
async def test_read_counts(orders_store):
    counts = await read_counts(orders_store, keys, BULLMQ_SCHEMA)
    assert counts == {
        "active": 1,
        "wait": 3,
        "paused": 0,
        "prioritized": 0,
        "waiting-children": 0,
        "failed": 2,
        "completed": 2,
        "delayed": 1,
        "stalled": 0,
    }


@pytest.mark.asyncio
async def test_failed_read_degrades_to_zero():
    store = FlakyStore()
    store.rpush("bull:orders:wait", "1", "2")
    store.zadd("bull:orders:failed", {"3": 1})

    counts = await read_counts(store, keys, BULLMQ_SCHEMA, ReadPolicy.DEGRADE)
    assert counts["failed"] == 0
    assert counts["wait"] == 2


@pytest.mark.asyncio
async def test_failed_read_raises_under_fail_fast():
    store = FlakyStore()
    store.zadd("bull:orders:failed", {"3": 1})

    with pytest.raises(StoreError):
        await read_counts(store, keys, BULLMQ_SCHEMA, ReadPolicy.FAIL_FAST)


@pytest.mark.asyncio
async def test_wrong_type_degrades(orders_store):
    orders_store.set("bull:orders:paused", "not-a-list")
    counts = await read_counts(orders_store, keys, BULLMQ_SCHEMA)
    assert counts["paused"] == 0
    assert counts["wait"] == 3


@pytest.mark.asyncio
async def test_unavailable_store_always_propagates():
    with pytest.raises(StoreUnavailable):
        await read_counts(DownStore(), keys, BULLMQ_SCHEMA, ReadPolicy.DEGRADE)


@pytest.mark.asyncio
async def test_read_ids_in_natural_order(orders_store):
    wait = BULLMQ_SCHEMA.collection_for("waiting")
    failed = BULLMQ_SCHEMA.collection_for("failed")

    assert (await read_ids(orders_store, keys, wait)).value == ["1", "2", "3"]
    assert (await read_ids(orders_store, keys, failed)).value == ["5", "6"]
    assert (await read_ids(orders_store, keys, wait, 1, 1)).value == ["2"]


@pytest.mark.asyncio
async def test_read_page(orders_store):
    wait = BULLMQ_SCHEMA.collection_for("waiting")

    assert (await read_page(orders_store, keys, wait, 2)).value == ["1", "2"]
    assert (await read_page(orders_store, keys, wait, 0)).value == []
    assert (await read_page(orders_store, keys, wait, 50)).value == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_plain_sets_are_sorted(store):
    store.sadd("bull:orders:failed", "b", "a", "c")
    failed = LEGACY_SCHEMA.collection_for("failed")

    assert (await read_ids(store, keys, failed)).value == ["a", "b", "c"]
    assert (await read_page(store, keys, failed, 2)).value == ["a", "b"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "start, stop, expected",
    [
        (0, -1, ["a", "b", "c"]),
        (0, -2, ["a", "b"]),
        (0, -3, ["a"]),
        (0, -4, []),
        (-2, -1, ["b", "c"]),
        (-10, 1, ["a", "b"]),
        (1, 10, ["b", "c"]),
        (2, 1, []),
    ],
)
async def test_plain_set_ranges_follow_list_ranges(store, start, stop, expected):
    store.sadd("bull:orders:failed", "b", "a", "c")
    store.rpush("bull:orders:wait", "a", "b", "c")
    failed = LEGACY_SCHEMA.collection_for("failed")
    wait = LEGACY_SCHEMA.collection_for("waiting")

    assert (await read_ids(store, keys, failed, start, stop)).value == expected
    assert (await read_ids(store, keys, wait, start, stop)).value == expected


@pytest.mark.asyncio
async def test_is_member(orders_store):
    wait = BULLMQ_SCHEMA.collection_for("waiting")
    failed = BULLMQ_SCHEMA.collection_for("failed")

    assert (await is_member(orders_store, keys, wait, "2")).value is True
    assert (await is_member(orders_store, keys, wait, "5")).value is False
    assert (await is_member(orders_store, keys, failed, "5")).value is True


@pytest.mark.asyncio
async def test_attempt_captures_store_errors(store):
    store.set("bull:orders:wait", "x")
    result = await attempt(store.llen, "bull:orders:wait", operation="llen")

    assert not result.ok
    assert isinstance(result.error, StoreError)
    assert result.resolve(0) == 0
    with pytest.raises(StoreError):
        result.resolve(0, ReadPolicy.FAIL_FAST)


def test_successful_result_ignores_policy():
    assert ReadResult(value=4, ok=True).resolve(0, ReadPolicy.FAIL_FAST) == 4


def test_get_read_policy():
    assert get_read_policy("fail_fast") == ReadPolicy.FAIL_FAST
    with pytest.raises(ImproperlyConfigured):
        get_read_policy("sometimes")
