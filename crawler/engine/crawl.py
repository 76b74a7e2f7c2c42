"""Bounded breadth-first crawl engine.

``CrawlEngine.run`` drives one batch from RUNNING to a terminal status:

    seeds → frontier (FIFO) → wave → gate → fetch → extract → save page
                  ↑                                          │
                  └──────────── links at depth + 1 ──────────┘

Two independent limits apply:

* **page budget** — ``max_pages_per_batch`` distinct URLs per batch, tracked
  by the batch's own ``visited`` set.  Reaching it ends the crawl normally.
* **global gate** — one :class:`asyncio.Semaphore` shared by every run in
  the process.  Each page task holds a permit for its whole fetch + save.

A page-level failure never leaves ``_process_task``: it becomes a
:class:`~crawler.engine.models.TaskFailure` carrying a page with ``error``
set, so the wave driver only ever sees outcome values.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable, Optional

from crawler import codec
from crawler.db.models import BatchStatus, PageContent, PageRecord
from crawler.engine.models import (
    BatchStatusStore,
    CrawlerConfig,
    CrawlTask,
    Fetcher,
    PageStore,
    TaskFailure,
    TaskOutcome,
    TaskSuccess,
)
from crawler.errors import StorageError
from crawler.scraper.extractor import extract_links, normalise_url
from crawler.scraper.models import FetchResult

logger = logging.getLogger(__name__)

LinkExtractor = Callable[[str, str], list[str]]


def error_message(exc: BaseException) -> str:
    """Return a non-empty, human-readable message for *exc*."""
    return str(exc) or exc.__class__.__name__


class CrawlEngine:
    """Runs crawls; one instance (and so one gate) per process.

    Args:
        config: Engine limits.
        fetcher: Page fetcher (``await fetcher.fetch(url)``).
        batch_store: Receives the RUNNING and terminal status updates.
        page_store: Receives one :class:`PageRecord` per dispatched URL.
        gate: Shared admission gate.  Defaults to a semaphore with
            ``config.concurrency`` permits created here.
        link_extractor: ``(html, base_url) -> links``.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        fetcher: Fetcher,
        batch_store: BatchStatusStore,
        page_store: PageStore,
        gate: Optional[asyncio.Semaphore] = None,
        link_extractor: LinkExtractor = extract_links,
    ) -> None:
        self._config = config
        self._fetcher = fetcher
        self._batch_store = batch_store
        self._page_store = page_store
        self._gate = gate if gate is not None else asyncio.Semaphore(config.concurrency)
        self._extract_links = link_extractor

    @property
    def config(self) -> CrawlerConfig:
        return self._config

    @property
    def gate(self) -> asyncio.Semaphore:
        return self._gate

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def run(
        self,
        batch_id: str,
        seed_urls: list[str],
        max_depth: Optional[int] = None,
    ) -> None:
        """Crawl outward from *seed_urls* and finish the batch.

        Seeds are normalised (fragment dropped, host lowercased, empty path
        made ``/``) before crawling; pages are recorded under that form while
        the batch keeps *seed_urls* exactly as submitted.

        Raises:
            StorageError: If the RUNNING update fails (nothing was crawled).
            Exception: Anything raised by the traversal loop itself, after
                an attempt to mark the batch FAILED.
        """
        depth_limit = self._config.default_max_depth if max_depth is None else max_depth
        budget = self._config.max_pages_per_batch
        visited: set[str] = set()
        # Seeds get the same normal form as extracted links so the visited
        # set matches a page linking back to a seed.  A seed that does not
        # normalise is kept as given and fails at fetch time.
        frontier: deque[CrawlTask] = deque(
            CrawlTask(normalise_url(url) or url, 0) for url in seed_urls
        )

        await self._batch_store.update_status(batch_id, BatchStatus.RUNNING)
        logger.info(
            "Batch %s started: %d seed(s), max depth %d", batch_id, len(frontier), depth_limit
        )

        try:
            while frontier:
                if len(visited) >= budget:
                    logger.info("Batch %s reached page limit of %d.", batch_id, budget)
                    break

                wave_size = min(self._config.concurrency, budget - len(visited), len(frontier))
                if wave_size <= 0:
                    break
                wave = [frontier.popleft() for _ in range(wave_size)]

                # Check-and-add happens with no await in between, so a URL
                # queued twice in one wave is dispatched once.
                dispatched = []
                for task in wave:
                    if task.url in visited:
                        continue
                    visited.add(task.url)
                    dispatched.append(self._dispatch(batch_id, task, depth_limit))

                outcomes = await asyncio.gather(*dispatched)

                for outcome in outcomes:
                    if not isinstance(outcome, TaskSuccess):
                        continue
                    for next_task in outcome.next_tasks:
                        if next_task.url not in visited:
                            frontier.append(next_task)
        except Exception as exc:
            logger.exception("Fatal error in batch %s", batch_id)
            await self._mark_failed(batch_id, exc)
            raise

        try:
            await self._batch_store.update_status(batch_id, BatchStatus.COMPLETED)
        except StorageError:
            # Known gap: the batch stays RUNNING for outside observers.
            logger.exception("Failed to mark batch %s COMPLETED", batch_id)
            return
        logger.info("Batch %s completed. Processed %d pages.", batch_id, len(visited))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _dispatch(self, batch_id: str, task: CrawlTask, depth_limit: int) -> TaskOutcome:
        async with self._gate:
            return await self._process_task(batch_id, task, depth_limit)

    async def _process_task(
        self, batch_id: str, task: CrawlTask, depth_limit: int
    ) -> TaskOutcome:
        """Fetch, extract and persist one page.  Never raises."""
        try:
            result = await self._fetcher.fetch(task.url)
            links = self._extract_links(result.body, result.final_url)
            record = self._build_record(batch_id, task, result, links)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to process page %s: %s", task.url, exc)
            record = PageRecord(
                batch_id=batch_id,
                url=task.url,
                depth=task.depth,
                error=error_message(exc),
            )
            await self._persist(record)
            return TaskFailure(page=record)

        await self._persist(record)
        if task.depth < depth_limit:
            next_tasks = [CrawlTask(link, task.depth + 1) for link in links]
        else:
            next_tasks = []
        return TaskSuccess(page=record, next_tasks=next_tasks)

    @staticmethod
    def _build_record(
        batch_id: str, task: CrawlTask, result: FetchResult, links: list[str]
    ) -> PageRecord:
        content: PageContent | None = None
        if result.body:
            compressed = codec.compress(result.body)
            content = PageContent(
                compressed_content=compressed,
                content_hash=codec.fingerprint(result.body),
                original_size=len(result.body.encode("utf-8")),
                compressed_size=len(compressed),
            )
        return PageRecord(
            batch_id=batch_id,
            url=task.url,
            depth=task.depth,
            status_code=result.status_code,
            links=list(links),
            duration_ms=result.duration_ms,
            content=content,
        )

    async def _persist(self, record: PageRecord) -> None:
        try:
            await self._page_store.save(record)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to persist page %s", record.url)

    async def _mark_failed(self, batch_id: str, exc: BaseException) -> None:
        try:
            await self._batch_store.update_status(
                batch_id, BatchStatus.FAILED, error_message(exc)
            )
        except Exception:  # noqa: BLE001
            logger.exception("Failed to mark batch %s FAILED", batch_id)
