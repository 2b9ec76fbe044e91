from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, List, Optional, Set, Tuple


class BaseStore(ABC):
    """
    Abstract base class defining the read-only capabilities bullscope needs
    from the key-value store holding the queues.

    The methods mirror the Redis commands of the same name. Implementations
    raise `StoreUnavailable` when the store cannot be reached and `StoreError`
    when a single command fails; they never write.
    """

    @abstractmethod
    async def scan(self, cursor: int, match: str, count: int) -> Tuple[int, List[str]]:
        """
        Runs one step of a cursor based key scan.

        Args:
            cursor: The cursor returned by the previous step, 0 to start.
            match: A glob-style pattern the keys must match.
            count: A hint for how many keys to examine in this step.

        Returns:
            A tuple of the next cursor (0 once the iteration is complete) and
            the keys found in this step.
        """
        ...

    @abstractmethod
    async def key_type(self, key: str) -> str:
        """
        Returns the type of the value stored at `key` ("string", "list",
        "set", "zset", "hash") or "none" when the key does not exist.
        """
        ...

    @abstractmethod
    async def hgetall(self, key: str) -> Dict[str, str]:
        """
        Returns every field of the hash at `key`, empty when it does not exist.
        """
        ...

    @abstractmethod
    async def hexists(self, key: str, field: str) -> bool:
        ...

    @abstractmethod
    async def llen(self, key: str) -> int:
        ...

    @abstractmethod
    async def lrange(self, key: str, start: int, stop: int) -> List[str]:
        """
        Returns the list elements between `start` and `stop`, both inclusive.
        Negative indexes count from the end.
        """
        ...

    @abstractmethod
    async def lpos(self, key: str, value: str) -> Optional[int]:
        """
        Returns the index of the first occurrence of `value` in the list at
        `key`, or None when it is absent.
        """
        ...

    @abstractmethod
    async def zcard(self, key: str) -> int:
        ...

    @abstractmethod
    async def zrange(self, key: str, start: int, stop: int) -> List[str]:
        """
        Returns the members between ranks `start` and `stop` (inclusive) in
        ascending score order.
        """
        ...

    @abstractmethod
    async def zscore(self, key: str, member: str) -> Optional[float]:
        """
        Returns the score of `member`, or None when it is not in the set.
        """
        ...

    @abstractmethod
    async def scard(self, key: str) -> int:
        ...

    @abstractmethod
    async def smembers(self, key: str) -> Set[str]:
        ...

    @abstractmethod
    async def sismember(self, key: str, member: str) -> bool:
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """
        Checks that the store answers.
        """
        ...

    async def close(self) -> None:
        """
        Releases the connections held by the store. No-op by default.
        """
        return None

    async def scan_keys(self, match: str, count: int = 100) -> AsyncIterator[str]:
        """
        Iterates every key matching `match`, following the scan cursor from 0
        until the store hands 0 back.

        A key may be yielded more than once when the keyspace changes during
        the iteration; callers that need uniqueness deduplicate.
        """
        cursor = 0
        while True:
            cursor, keys = await self.scan(cursor, match, count)
            for key in keys:
                yield key
            if cursor == 0:
                break


def range_slice(length: int, start: int, stop: int) -> slice:
    """
    Translates an inclusive Redis range (LRANGE, ZRANGE) over a sequence of
    `length` items into a Python slice. Negative indexes count from the end
    and out of range indexes are clamped.
    """
    if start < 0:
        start = max(length + start, 0)
    if stop < 0:
        stop = length + stop
    if start > stop or start >= length:
        return slice(0, 0)
    return slice(start, min(stop, length - 1) + 1)
