import json

import pytest

from bullscope.conf import settings
from bullscope.core.dependencies import get_default_store, get_settings
from bullscope.stores.memory import InMemoryStore
from bullscope.stores.redis_store import RedisStore

# Use pytest-asyncio
pytest_plugins = ("pytest_asyncio",)

PREFIX = "bull"


class SeededRedisStore(RedisStore):
    """
    A RedisStore over a fakeredis server. The write helpers mirror those of
    InMemoryStore and go through a synchronous client sharing the server, so
    tests seed either store the same way.
    """

    def __init__(self, reader, writer) -> None:
        super().__init__(reader)
        self.writer = writer

    def rpush(self, key, *values):
        return self.writer.rpush(key, *values)

    def zadd(self, key, mapping):
        return self.writer.zadd(key, mapping)

    def sadd(self, key, *members):
        return self.writer.sadd(key, *members)

    def hset(self, key, mapping):
        return self.writer.hset(key, mapping=mapping)

    def set(self, key, value):
        return self.writer.set(key, value)

    def delete(self, *keys):
        return self.writer.delete(*keys)


def add_job(store, queue: str, job_id: str, prefix: str = PREFIX, **fields) -> None:
    """
    Writes a job hash the way a BullMQ producer lays it out.
    """
    record = {
        "name": fields.pop("name", "process"),
        "data": json.dumps(fields.pop("data", {})),
        "opts": json.dumps(fields.pop("opts", {"attempts": 3})),
        "timestamp": fields.pop("timestamp", 1700000000000 + int(job_id) if job_id.isdigit() else 1700000000000),
        "attemptsMade": fields.pop("attemptsMade", 0),
    }
    record.update(fields)
    store.hset(f"{prefix}:{queue}:{job_id}", mapping=record)


def seed_orders(store, prefix: str = PREFIX):
    """
    The "orders" queue:

    - wait: 1, 2, 3 / active: 4 / delayed: 8
    - failed: 5, 6 / completed: 5, 7 (5 is caught mid-transition)
    - hashes 9 and 10 are not referenced by any collection (orphans)

    plus an "emails" queue that only ever handed out an ID.
    """
    stem = f"{prefix}:orders"
    store.set(f"{stem}:id", 10)
    store.hset(f"{stem}:meta", mapping={"opts.maxLenEvents": 10000})
    store.set(f"{stem}:events", "stream")

    store.rpush(f"{stem}:wait", "1", "2", "3")
    store.rpush(f"{stem}:active", "4")
    store.zadd(f"{stem}:failed", {"5": 1, "6": 2})
    store.zadd(f"{stem}:completed", {"5": 3, "7": 4})
    store.zadd(f"{stem}:delayed", {"8": 1700000100000})

    add_job(store, "orders", "1", prefix=prefix, name="charge", data={"order": 1})
    add_job(store, "orders", "2", prefix=prefix, name="charge", data={"sku": "ABC-123"})
    add_job(store, "orders", "3", prefix=prefix, name="ship")
    add_job(store, "orders", "4", prefix=prefix, name="charge", processedOn=1700000000500)
    add_job(store, "orders", "5", prefix=prefix, name="refund", failedReason="card declined", attemptsMade=3)
    add_job(
        store,
        "orders",
        "6",
        prefix=prefix,
        name="ship",
        failedReason="connection timeout",
        stacktrace=json.dumps(["Error: connection timeout", "    at ship.js:10"]),
        attemptsMade=2,
    )
    add_job(store, "orders", "7", prefix=prefix, name="ship", returnvalue=json.dumps({"ok": True}))
    add_job(store, "orders", "8", prefix=prefix, name="remind", delay=60000)
    add_job(store, "orders", "9", prefix=prefix, name="charge")
    add_job(store, "orders", "10", prefix=prefix, name="charge")

    store.set(f"{prefix}:emails:id", 1)
    return store


@pytest.fixture(params=["memory", "fakeredis"])
def store(request):
    """
    An empty store: the in-memory one, then `RedisStore` over fakeredis so
    every read is also checked against real Redis command semantics.
    """
    if request.param == "memory":
        return InMemoryStore()

    fakeredis = pytest.importorskip("fakeredis")
    server = fakeredis.FakeServer()
    return SeededRedisStore(
        fakeredis.FakeAsyncRedis(server=server, decode_responses=True),
        fakeredis.FakeRedis(server=server, decode_responses=True),
    )


@pytest.fixture
def orders_store(store):
    return seed_orders(store)


@pytest.fixture
def job_factory():
    return add_job


@pytest.fixture
def orders_factory():
    return seed_orders


@pytest.fixture
def configured_store():
    """
    Installs a seeded in-memory store as `settings.store` for the dashboard
    and the CLI, and keeps the metrics poller out of the way.
    """
    get_settings.cache_clear()
    get_default_store.cache_clear()

    original_store = settings.store
    original_poll = settings.metrics_poll_enabled
    orders_store = seed_orders(InMemoryStore())
    settings.store = orders_store
    settings.metrics_poll_enabled = False
    yield orders_store
    settings.store = original_store
    settings.metrics_poll_enabled = original_poll
