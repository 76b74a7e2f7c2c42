"""Fire-and-forget crawl scheduling with outcome tracking.

``schedule`` starts a crawl as an :class:`asyncio.Task` and returns at once;
``drain`` waits for every crawl still running, e.g. on shutdown.  Callers
must stop scheduling before they drain; this class does not enforce it.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Optional

from crawler.db.models import BatchStatus
from crawler.engine.crawl import CrawlEngine, error_message
from crawler.engine.models import BatchStatusStore

logger = logging.getLogger(__name__)


class CrawlOrchestrator:
    def __init__(self, engine: CrawlEngine, batch_store: BatchStatusStore) -> None:
        self._engine = engine
        self._batch_store = batch_store
        self._active: dict[str, asyncio.Task[None]] = {}

    @property
    def active_count(self) -> int:
        return len(self._active)

    def is_active(self, batch_id: str) -> bool:
        return batch_id in self._active

    def schedule(
        self,
        batch_id: str,
        urls: list[str],
        max_depth: Optional[int] = None,
    ) -> asyncio.Task[None]:
        """Start crawling *batch_id* in the background.

        Must be called from within a running event loop.  The returned task
        never raises: crawl failures are turned into a FAILED batch.
        """
        logger.info("Scheduling crawl for batch %s", batch_id)
        task = asyncio.create_task(
            self._run(batch_id, list(urls), max_depth), name=f"crawl-{batch_id}"
        )
        self._active[batch_id] = task
        task.add_done_callback(partial(self._forget, batch_id))
        return task

    async def drain(self) -> None:
        """Wait until every crawl active right now has settled."""
        pending = list(self._active.values())
        if not pending:
            return
        logger.info("Waiting for %d crawl(s) to finish...", len(pending))
        await asyncio.gather(*pending, return_exceptions=True)
        logger.info("All crawls settled.")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _run(self, batch_id: str, urls: list[str], max_depth: Optional[int]) -> None:
        try:
            await self._engine.run(batch_id, urls, max_depth)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Fatal error in crawl for batch %s", batch_id)
            try:
                await self._batch_store.update_status(
                    batch_id, BatchStatus.FAILED, error_message(exc)
                )
            except Exception:  # noqa: BLE001
                logger.exception("Failed to update batch status to FAILED for %s", batch_id)

    def _forget(self, batch_id: str, task: asyncio.Task[None]) -> None:
        # A later schedule() for the same id may have replaced this task.
        if self._active.get(batch_id) is task:
            del self._active[batch_id]
