from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bullscope import metrics
from bullscope.aggregator import get_jobs_across_states, get_jobs_by_state
from bullscope.classifier import classify_job_state
from bullscope.core.enums import JobState, ReadPolicy
from bullscope.core.keys import BULLMQ_SCHEMA, QueueKeys, Schema, get_schema
from bullscope.core.results import get_read_policy
from bullscope.discovery import discover_queues
from bullscope.jobs import Job, JobSummary, load_job
from bullscope.logging import logger
from bullscope.orphans import collect_referenced_ids, count_orphans
from bullscope.readers import read_counts
from bullscope.stats import QueueStats
from bullscope.stores.base import BaseStore

if TYPE_CHECKING:
    from bullscope.conf.global_settings import Settings


class Explorer:
    """
    Read-only view over the queues stored under one key prefix.

    The explorer holds no state besides its configuration: every call reads
    the store again, and reads within one call are not isolated from
    concurrent writers. Each public operation is timed under its own name in
    `redis_operation_duration_seconds`.
    """

    def __init__(
        self,
        store: BaseStore,
        prefix: str = "bull",
        schema: Schema | str = BULLMQ_SCHEMA,
        read_policy: ReadPolicy | str = ReadPolicy.DEGRADE,
        scan_count: int = 100,
    ) -> None:
        """
        Args:
            store: The store holding the queues.
            prefix: The key prefix shared by the queues.
            schema: The storage layout, or its name ("bullmq" or "legacy").
            read_policy: What a failed collection read contributes to counts
                and listings.
            scan_count: The COUNT hint used when scanning the keyspace.
        """
        self.store = store
        self.prefix = prefix
        self.schema = get_schema(schema) if isinstance(schema, str) else schema
        self.read_policy = get_read_policy(read_policy)
        self.scan_count = scan_count

    @classmethod
    def from_settings(cls, settings: Settings | Any = None, store: BaseStore | None = None) -> Explorer:
        """
        Builds an explorer from the settings and the configured store.
        """
        from bullscope.core.dependencies import get_store

        if settings is None:
            from bullscope.conf import settings as configured

            settings = configured
        return cls(
            store=store if store is not None else get_store(),
            prefix=settings.queue_prefix,
            schema=settings.schema,
            read_policy=settings.read_policy,
            scan_count=settings.scan_count,
        )

    def keys(self, queue: str) -> QueueKeys:
        return QueueKeys(self.prefix, queue)

    async def discover_queues(self) -> list[str]:
        """
        Returns the names of every queue under the prefix. Store errors
        propagate.
        """
        with metrics.track("discover_queues"):
            return await discover_queues(self.store, self.prefix, self.scan_count)

    async def get_queue_stats(self, queues: list[str]) -> list[QueueStats]:
        """
        Computes the counts of each queue and refreshes its gauges.

        Collection reads that fail are handled by the read policy; the orphan
        count reuses the referenced IDs read for the same queue.
        """
        with metrics.track("get_queue_stats"):
            stats: list[QueueStats] = []
            for queue in queues:
                keys = self.keys(queue)
                counts = await read_counts(self.store, keys, self.schema, self.read_policy)
                referenced = await collect_referenced_ids(self.store, keys, self.schema, self.read_policy)
                orphaned = await count_orphans(
                    self.store,
                    keys,
                    self.schema,
                    self.read_policy,
                    referenced=referenced,
                    count=self.scan_count,
                )
                stat = QueueStats.from_counts(queue, counts, orphaned)
                metrics.record_queue_stats(stat)
                stats.append(stat)
            return stats

    async def get_queue_stat(self, queue: str) -> QueueStats:
        stats = await self.get_queue_stats([queue])
        return stats[0]

    async def get_all_stats(self) -> list[QueueStats]:
        """
        Discovers the queues and computes their stats.
        """
        queues = await self.discover_queues()
        logger.debug(f"Found {len(queues)} queues: {queues}")
        return await self.get_queue_stats(queues)

    async def classify(self, queue: str, job_id: str) -> JobState:
        return await classify_job_state(self.store, self.keys(queue), job_id, self.schema)

    async def get_job(self, queue: str, job_id: str) -> Job:
        """
        Loads a job and resolves its state.

        Raises:
            JobNotFound: If the job has no hash.
        """
        with metrics.track("get_job"):
            keys = self.keys(queue)
            job = await load_job(self.store, keys, job_id)
            job.state = await classify_job_state(self.store, keys, job_id, self.schema)
            return job

    async def get_jobs_by_state(
        self,
        queue: str,
        state: JobState | str,
        limit: int = 100,
        query: str | None = None,
    ) -> list[JobSummary]:
        """
        Lists jobs of one state, or of every state when `state` is "all".

        Raises:
            UnknownState: If `state` is not recognized.
        """
        with metrics.track("get_jobs_by_state"):
            return await get_jobs_by_state(
                self.store,
                self.keys(queue),
                state,
                limit,
                self.schema,
                self.read_policy,
                query,
            )

    async def get_jobs_across_states(
        self,
        queue: str,
        limit: int = 100,
        query: str | None = None,
    ) -> list[JobSummary]:
        with metrics.track("get_jobs_across_states"):
            return await get_jobs_across_states(
                self.store,
                self.keys(queue),
                limit,
                self.schema,
                self.read_policy,
                query,
            )

    async def search_jobs(self, queue: str, query: str, limit: int = 100) -> list[JobSummary]:
        """
        Searches every state of a queue for jobs matching `query`.
        """
        return await self.get_jobs_across_states(queue, limit, query)

    async def ping(self) -> bool:
        return await self.store.ping()

    def __repr__(self) -> str:
        return f"Explorer(store={self.store!r}, prefix={self.prefix!r}, schema={self.schema.name!r})"
