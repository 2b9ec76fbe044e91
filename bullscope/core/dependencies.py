from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bullscope.explorer import Explorer
    from bullscope.stores.base import BaseStore


@lru_cache
def get_settings() -> Any:
    from bullscope.conf import settings

    return settings


@lru_cache
def get_default_store() -> BaseStore:
    """
    Creates the RedisStore described by the connection settings, once per
    process.
    """
    from bullscope.stores.redis_store import RedisStore

    return RedisStore.from_settings(get_settings())


def get_store() -> BaseStore:
    """
    Returns `settings.store` when one is configured, the default RedisStore
    otherwise.
    """
    settings = get_settings()
    if settings.store is not None:
        return settings.store
    return get_default_store()


def get_explorer() -> Explorer:
    from bullscope.explorer import Explorer

    return Explorer.from_settings(get_settings(), store=get_store())
