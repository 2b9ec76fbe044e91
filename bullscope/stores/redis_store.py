from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

import redis.asyncio as redis
from redis.asyncio.sentinel import Sentinel
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from bullscope.exceptions import StoreError, StoreUnavailable
from bullscope.stores.base import BaseStore

if TYPE_CHECKING:
    from bullscope.conf.global_settings import RedisSettings


def _parse_address(address: str) -> tuple[str, int]:
    host, _, port = address.rpartition(":")
    if not host:
        return address, 26379
    return host, int(port)


class RedisStore(BaseStore):
    """
    Read-only store over a Redis (or Valkey) server using `redis.asyncio`.

    Connection and timeout failures are raised as `StoreUnavailable`; any other
    error reported by the server (for example WRONGTYPE) as `StoreError`.
    """

    def __init__(self, redis_url_or_client: str | redis.Redis = "redis://localhost") -> None:
        """
        Args:
            redis_url_or_client: A connection URL, or an existing
                `redis.asyncio.Redis` client created with
                `decode_responses=True`.
        """
        if isinstance(redis_url_or_client, str):
            self.redis: redis.Redis = redis.from_url(redis_url_or_client, decode_responses=True)
        else:
            self.redis = redis_url_or_client

    @classmethod
    def from_settings(cls, settings: RedisSettings) -> RedisStore:
        """
        Builds a store from the connection settings, going through Sentinel
        when a master name and sentinel addresses are configured.
        """
        if settings.uses_sentinel:
            sentinel_kwargs = {}
            if settings.redis_sentinel_username:
                sentinel_kwargs["username"] = settings.redis_sentinel_username
            if settings.redis_sentinel_password:
                sentinel_kwargs["password"] = settings.redis_sentinel_password

            sentinel = Sentinel(
                [_parse_address(address) for address in settings.redis_sentinel_addrs],
                sentinel_kwargs=sentinel_kwargs or None,
                username=settings.redis_username or None,
                password=settings.redis_password or None,
                db=settings.redis_db,
            )
            return cls(sentinel.master_for(settings.redis_sentinel_master, decode_responses=True))
        return cls(settings.connection_url)

    @contextmanager
    def _command(self, name: str) -> Iterator[None]:
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise StoreUnavailable(f"{name}: {exc}") from exc
        except RedisError as exc:
            raise StoreError(f"{name}: {exc}") from exc

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        with self._command("SCAN"):
            next_cursor, keys = await self.redis.scan(cursor=cursor, match=match, count=count)
        return int(next_cursor), list(keys)

    async def key_type(self, key: str) -> str:
        with self._command("TYPE"):
            return await self.redis.type(key)

    async def hgetall(self, key: str) -> dict[str, str]:
        with self._command("HGETALL"):
            return await self.redis.hgetall(key)

    async def hexists(self, key: str, field: str) -> bool:
        with self._command("HEXISTS"):
            return bool(await self.redis.hexists(key, field))

    async def llen(self, key: str) -> int:
        with self._command("LLEN"):
            return int(await self.redis.llen(key))

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        with self._command("LRANGE"):
            return await self.redis.lrange(key, start, stop)

    async def lpos(self, key: str, value: str) -> int | None:
        with self._command("LPOS"):
            return await self.redis.lpos(key, value)

    async def zcard(self, key: str) -> int:
        with self._command("ZCARD"):
            return int(await self.redis.zcard(key))

    async def zrange(self, key: str, start: int, stop: int) -> list[str]:
        with self._command("ZRANGE"):
            return await self.redis.zrange(key, start, stop)

    async def zscore(self, key: str, member: str) -> float | None:
        with self._command("ZSCORE"):
            return await self.redis.zscore(key, member)

    async def scard(self, key: str) -> int:
        with self._command("SCARD"):
            return int(await self.redis.scard(key))

    async def smembers(self, key: str) -> set[str]:
        with self._command("SMEMBERS"):
            return set(await self.redis.smembers(key))

    async def sismember(self, key: str, member: str) -> bool:
        with self._command("SISMEMBER"):
            return bool(await self.redis.sismember(key, member))

    async def ping(self) -> bool:
        with self._command("PING"):
            return bool(await self.redis.ping())

    async def close(self) -> None:
        await self.redis.aclose()

    def __repr__(self) -> str:
        return f"RedisStore({self.redis!r})"
