from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, TypeVar

from bullscope.core.enums import JobState
from bullscope.core.keys import QueueKeys
from bullscope.exceptions import JobNotFound
from bullscope.logging import logger
from bullscope.stores.base import BaseStore

T = TypeVar("T")


def _parse_json(raw: str) -> Any:
    return json.loads(raw)


def _parse_int(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        # Some producers write epoch millis as floats.
        return int(float(raw))


def _parse_stacktrace(raw: str) -> list[str]:
    value = json.loads(raw)
    if not isinstance(value, list):
        raise ValueError("stacktrace is not a list")
    return [str(line) for line in value]


def _decode(fields: dict[str, str], name: str, parser: Callable[[str], T], default: T, job_id: str) -> T:
    """
    Decodes one field of a job hash. Missing fields and fields that fail to
    parse yield `default`, so one malformed field never hides the record.
    """
    raw = fields.get(name)
    if raw is None or raw == "":
        return default
    try:
        return parser(raw)
    except (ValueError, TypeError, OverflowError, RecursionError) as exc:
        logger.debug(f"Job {job_id}: could not decode field '{name}': {exc}")
        return default


@dataclass
class Job:
    """
    A decoded job hash.

    `state` is not part of the record: it is resolved from the state
    collections referencing the job and is `JobState.UNKNOWN` until then.
    """

    id: str
    queue: str
    name: str = ""
    data: Any = field(default_factory=dict)
    opts: Any = field(default_factory=dict)
    progress: Any = 0
    delay: int = 0
    timestamp: int = 0
    attempts_made: int = 0
    failed_reason: str = ""
    stacktrace: list[str] = field(default_factory=list)
    returnvalue: Any = None
    finished_on: int = 0
    processed_on: int = 0
    state: JobState = JobState.UNKNOWN
    # Serialized payloads as stored, kept for listings and search.
    raw_data: str = ""
    raw_opts: str = ""

    @classmethod
    def from_hash(cls, queue: str, job_id: str, fields: dict[str, str]) -> Job:
        """
        Builds a job from the fields of its hash. Fields that are missing or
        fail to decode keep their zero value.
        """
        return cls(
            id=job_id,
            queue=queue,
            name=fields.get("name", ""),
            data=_decode(fields, "data", _parse_json, {}, job_id),
            opts=_decode(fields, "opts", _parse_json, {}, job_id),
            progress=_decode(fields, "progress", _parse_json, 0, job_id),
            delay=_decode(fields, "delay", _parse_int, 0, job_id),
            timestamp=_decode(fields, "timestamp", _parse_int, 0, job_id),
            attempts_made=_decode(fields, "attemptsMade", _parse_int, 0, job_id),
            failed_reason=fields.get("failedReason", ""),
            stacktrace=_decode(fields, "stacktrace", _parse_stacktrace, [], job_id),
            returnvalue=_decode(fields, "returnvalue", _parse_json, None, job_id),
            finished_on=_decode(fields, "finishedOn", _parse_int, 0, job_id),
            processed_on=_decode(fields, "processedOn", _parse_int, 0, job_id),
            raw_data=fields.get("data", ""),
            raw_opts=fields.get("opts", ""),
        )

    @property
    def created_at(self) -> datetime:
        try:
            return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return datetime.fromtimestamp(0, tz=timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        """
        Serializes the job with the field names of the hash, plus the resolved
        state and the queue name.
        """
        return {
            "id": self.id,
            "name": self.name,
            "data": self.data,
            "opts": self.opts,
            "progress": self.progress,
            "delay": self.delay,
            "timestamp": self.timestamp,
            "attemptsMade": self.attempts_made,
            "failedReason": self.failed_reason,
            "stacktrace": self.stacktrace,
            "returnvalue": self.returnvalue,
            "finishedOn": self.finished_on,
            "processedOn": self.processed_on,
            "state": str(self.state),
            "queue": self.queue,
        }


@dataclass
class JobSummary:
    """
    The lighter projection of a job used by listings.
    """

    id: str
    name: str
    state: JobState
    queue: str
    timestamp: datetime
    attempts_made: int = 0
    data: str = ""
    opts: str = ""
    failed_reason: str = ""

    @classmethod
    def from_job(cls, job: Job, state: JobState) -> JobSummary:
        return cls(
            id=job.id,
            name=job.name,
            state=state,
            queue=job.queue,
            timestamp=job.created_at,
            attempts_made=job.attempts_made,
            data=job.raw_data or _dumps(job.data),
            opts=job.raw_opts or _dumps(job.opts),
            failed_reason=job.failed_reason,
        )

    def matches(self, query: str | None) -> bool:
        """
        Case-insensitive substring match against the ID, name, serialized
        data, serialized options and failure reason. An empty query matches
        everything.
        """
        if not query:
            return True
        needle = query.casefold()
        return any(
            needle in haystack.casefold()
            for haystack in (self.id, self.name, self.data, self.opts, self.failed_reason)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "state": str(self.state),
            "queue": self.queue,
            "timestamp": self.timestamp.isoformat(),
            "attemptsMade": self.attempts_made,
            "data": self.data,
            "opts": self.opts,
            "failedReason": self.failed_reason,
        }


def _dumps(value: Any) -> str:
    if value in (None, {}, []):
        return ""
    return json.dumps(value)


async def load_job(store: BaseStore, keys: QueueKeys, job_id: str) -> Job:
    """
    Loads and decodes the hash of one job.

    Raises:
        JobNotFound: If the job has no hash.
        StoreError: If the hash could not be read.
    """
    fields = await store.hgetall(keys.job(job_id))
    if not fields:
        raise JobNotFound(keys.queue, job_id)
    return Job.from_hash(keys.queue, job_id, fields)
