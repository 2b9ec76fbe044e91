from __future__ import annotations

import re
from typing import Any

from bullscope.exceptions import StoreError
from bullscope.stores.base import BaseStore, range_slice


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """
    Translates a Redis MATCH pattern (`*`, `?`, `[...]`, backslash escapes)
    into a compiled regular expression.
    """
    out: list[str] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if char == "*":
            out.append(".*")
        elif char == "?":
            out.append(".")
        elif char == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(char))
            else:
                body = pattern[i + 1 : end]
                if body.startswith("^"):
                    body = "^" + re.escape(body[1:])
                else:
                    body = re.escape(body)
                out.append(f"[{body.replace(chr(92) + '-', '-')}]")
                i = end
        else:
            out.append(re.escape(char))
        i += 1
    return re.compile("".join(out) + r"\Z", re.DOTALL)


class InMemoryStore(BaseStore):
    """
    A dictionary backed store with Redis semantics for the commands bullscope
    reads with. It also exposes a handful of writers (`rpush`, `zadd`, `hset`,
    ...) so fixtures and demos can lay out a queue without a server.

    Reading a key with a command of the wrong type raises `StoreError`, like
    Redis' WRONGTYPE reply.
    """

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}

    def _get(self, key: str, kind: type, type_name: str) -> Any:
        value = self.data.get(key)
        if value is None:
            return kind()
        if not isinstance(value, kind):
            raise StoreError(f"WRONGTYPE key '{key}' does not hold a {type_name}")
        return value

    # Writers used to lay out fixtures.

    def rpush(self, key: str, *values: str) -> int:
        items = self._get(key, list, "list")
        items.extend(values)
        self.data[key] = items
        return len(items)

    def zadd(self, key: str, mapping: dict[str, float]) -> int:
        members = self._zset(key)
        added = len(set(mapping) - set(members))
        members.update({member: float(score) for member, score in mapping.items()})
        self.data[key] = members
        return added

    def sadd(self, key: str, *members: str) -> int:
        current = self._get(key, set, "set")
        added = len(set(members) - current)
        current.update(members)
        self.data[key] = current
        return added

    def hset(self, key: str, mapping: dict[str, Any]) -> int:
        fields = self._get(key, _Hash, "hash")
        added = len(set(mapping) - set(fields))
        fields.update({name: str(value) for name, value in mapping.items()})
        self.data[key] = fields
        return added

    def set(self, key: str, value: Any) -> None:
        self.data[key] = str(value)

    def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    def flushall(self) -> None:
        self.data.clear()

    # Read interface.

    async def scan(self, cursor: int, match: str, count: int) -> tuple[int, list[str]]:
        regex = glob_to_regex(match)
        keys = sorted(self.data)
        batch = keys[cursor : cursor + max(count, 1)]
        next_cursor = cursor + len(batch)
        if next_cursor >= len(keys):
            next_cursor = 0
        return next_cursor, [key for key in batch if regex.match(key)]

    async def key_type(self, key: str) -> str:
        value = self.data.get(key)
        if value is None:
            return "none"
        if isinstance(value, _Hash):
            return "hash"
        if isinstance(value, list):
            return "list"
        if isinstance(value, set):
            return "set"
        if isinstance(value, dict):
            return "zset"
        return "string"

    async def hgetall(self, key: str) -> dict[str, str]:
        return dict(self._get(key, _Hash, "hash"))

    async def hexists(self, key: str, field: str) -> bool:
        return field in self._get(key, _Hash, "hash")

    async def llen(self, key: str) -> int:
        return len(self._get(key, list, "list"))

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        items = self._get(key, list, "list")
        return list(items[range_slice(len(items), start, stop)])

    async def lpos(self, key: str, value: str) -> int | None:
        items = self._get(key, list, "list")
        try:
            return items.index(value)
        except ValueError:
            return None

    def _zset(self, key: str) -> dict[str, float]:
        value = self.data.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict) or isinstance(value, _Hash):
            raise StoreError(f"WRONGTYPE key '{key}' does not hold a zset")
        return value

    async def zcard(self, key: str) -> int:
        return len(self._zset(key))

    async def zrange(self, key: str, start: int, stop: int) -> list[str]:
        ordered = [member for member, _ in sorted(self._zset(key).items(), key=lambda item: (item[1], item[0]))]
        return ordered[range_slice(len(ordered), start, stop)]

    async def zscore(self, key: str, member: str) -> float | None:
        return self._zset(key).get(member)

    async def scard(self, key: str) -> int:
        return len(self._get(key, set, "set"))

    async def smembers(self, key: str) -> set[str]:
        return set(self._get(key, set, "set"))

    async def sismember(self, key: str, member: str) -> bool:
        return member in self._get(key, set, "set")

    async def ping(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"InMemoryStore(keys={len(self.data)})"


class _Hash(dict):
    """
    Marks a dict as a Redis hash, keeping it apart from sorted sets.
    """
