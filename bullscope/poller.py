from __future__ import annotations

import anyio

from bullscope.exceptions import BullscopeException
from bullscope.explorer import Explorer
from bullscope.logging import logger


class MetricsPoller:
    """
    Re-computes the stats of every queue on a fixed interval so the queue
    gauges stay fresh between dashboard requests.

    A failed round is logged and skipped, whatever it raised; the poller only
    stops when its task is cancelled.
    """

    def __init__(self, explorer: Explorer, interval: float = 10.0) -> None:
        self.explorer = explorer
        self.interval = max(1.0, float(interval))
        self.rounds = 0

    async def poll_once(self) -> None:
        try:
            queues = await self.explorer.discover_queues()
        except BullscopeException as exc:
            logger.warning(f"Discovering queues (metrics poller) failed: {exc}")
            return
        except Exception:
            logger.exception("Discovering queues (metrics poller) failed unexpectedly.")
            return

        try:
            await self.explorer.get_queue_stats(queues)
        except BullscopeException as exc:
            logger.warning(f"Computing queue stats (metrics poller) failed: {exc}")
            return
        except Exception:
            logger.exception("Computing queue stats (metrics poller) failed unexpectedly.")
            return
        self.rounds += 1

    async def run(self) -> None:
        logger.info(f"Metrics poller started (every {self.interval:g}s).")
        try:
            while True:
                await anyio.sleep(self.interval)
                await self.poll_once()
        finally:
            logger.info("Metrics poller stopped.")
