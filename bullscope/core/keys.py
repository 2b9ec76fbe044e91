from __future__ import annotations

from dataclasses import dataclass

from bullscope.core.enums import JobState, Structure
from bullscope.exceptions import ImproperlyConfigured

# Suffixes under `prefix:queue:` that never name a job hash.
RESERVED_SUFFIXES: frozenset[str] = frozenset(
    {
        "id",
        "meta",
        "events",
        "wait",
        "active",
        "failed",
        "completed",
        "delayed",
        "stalled",
        "paused",
        "priority",
        "prioritized",
        "waiting-children",
    }
)

# Hash field whose presence marks a hash as a job record.
JOB_SIGNATURE_FIELD = "name"

_GLOB_SPECIAL = "\\*?[]"


def escape_glob(value: str) -> str:
    """
    Escapes the characters Redis treats specially in MATCH patterns so a
    prefix or queue name is matched literally.
    """
    return "".join(f"\\{char}" if char in _GLOB_SPECIAL else char for char in value)


@dataclass(frozen=True)
class Collection:
    """
    One per-queue state collection: the key suffix it lives under, the job
    state it stands for, and the Redis type that backs it.
    """

    kind: str
    state: JobState
    structure: Structure


@dataclass(frozen=True)
class Schema:
    """
    A storage layout. `collections` is ordered by classification precedence:
    when a job ID appears in more than one collection, the earlier one wins.
    """

    name: str
    collections: tuple[Collection, ...]

    @property
    def states(self) -> tuple[JobState, ...]:
        return tuple(collection.state for collection in self.collections)

    @property
    def kinds(self) -> tuple[str, ...]:
        return tuple(collection.kind for collection in self.collections)

    def collection_for(self, state: JobState) -> Collection | None:
        for collection in self.collections:
            if collection.state == state:
                return collection
        return None


BULLMQ_SCHEMA = Schema(
    name="bullmq",
    collections=(
        Collection("active", JobState.ACTIVE, Structure.LIST),
        Collection("wait", JobState.WAITING, Structure.LIST),
        Collection("paused", JobState.PAUSED, Structure.LIST),
        Collection("prioritized", JobState.PRIORITIZED, Structure.ZSET),
        Collection("waiting-children", JobState.WAITING_CHILDREN, Structure.ZSET),
        Collection("failed", JobState.FAILED, Structure.ZSET),
        Collection("completed", JobState.COMPLETED, Structure.ZSET),
        Collection("delayed", JobState.DELAYED, Structure.ZSET),
        Collection("stalled", JobState.STALLED, Structure.ZSET),
    ),
)

# Older Bull layout: failures and completions kept in plain sets.
LEGACY_SCHEMA = Schema(
    name="legacy",
    collections=(
        Collection("active", JobState.ACTIVE, Structure.LIST),
        Collection("wait", JobState.WAITING, Structure.LIST),
        Collection("failed", JobState.FAILED, Structure.SET),
        Collection("completed", JobState.COMPLETED, Structure.SET),
        Collection("delayed", JobState.DELAYED, Structure.ZSET),
    ),
)

SCHEMAS: dict[str, Schema] = {
    BULLMQ_SCHEMA.name: BULLMQ_SCHEMA,
    LEGACY_SCHEMA.name: LEGACY_SCHEMA,
}

# Classification precedence of the default layout.
STATE_PRECEDENCE: tuple[JobState, ...] = BULLMQ_SCHEMA.states


def get_schema(name: str) -> Schema:
    """
    Looks up a storage layout by name.

    Raises:
        ImproperlyConfigured: If no layout has that name.
    """
    try:
        return SCHEMAS[name]
    except KeyError:
        raise ImproperlyConfigured(
            f"Unknown schema '{name}'. Expected one of: {', '.join(sorted(SCHEMAS))}."
        ) from None


def sentinel_pattern(prefix: str) -> str:
    """
    The SCAN pattern matching every queue's auto-increment id key.
    """
    return f"{escape_glob(prefix)}:*:id"


def queue_name_from_key(prefix: str, key: str) -> str | None:
    """
    Extracts the queue namespace from a sentinel key such as `bull:emails:id`.

    The namespace is the colon separated component right after the prefix.
    Keys too short to carry one yield None.
    """
    parts = key.split(":")
    position = prefix.count(":") + 1
    if len(parts) < position + 2:
        return None
    return parts[position]


class QueueKeys:
    """
    Builds the keys of one queue namespace.
    """

    def __init__(self, prefix: str, queue: str) -> None:
        self.prefix = prefix
        self.queue = queue
        self.stem = f"{prefix}:{queue}"

    @property
    def sentinel(self) -> str:
        return f"{self.stem}:id"

    @property
    def scan_pattern(self) -> str:
        return f"{escape_glob(self.stem)}:*"

    def collection(self, kind: str) -> str:
        return f"{self.stem}:{kind}"

    def job(self, job_id: str) -> str:
        return f"{self.stem}:{job_id}"

    def suffix(self, key: str) -> str:
        """
        Returns the part of `key` after `prefix:queue:`.
        """
        return key[len(self.stem) + 1 :]

    def __repr__(self) -> str:
        return f"QueueKeys({self.stem!r})"
