"""Async facade over the synchronous SQLite CRUD modules.

:class:`CrawlStore` is what the crawl engine, the orchestrator and the API
talk to.  It satisfies both storage contracts the engine consumes:

* batch status store — :meth:`CrawlStore.update_status`
* page store         — :meth:`CrawlStore.save`

Every call runs in a worker thread so the event loop is never blocked on
disk I/O, and holds a lock because all calls share one connection.  Any
``sqlite3.Error`` surfaces as :class:`~crawler.errors.StorageError`.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from typing import Any, Callable, Optional, TypeVar

from crawler import codec
from crawler.db import batches, pages
from crawler.db.models import Batch, BatchResult, BatchStatus, Page, PageRecord, PageResult
from crawler.errors import CodecError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DECOMPRESS_ERROR = "Failed to decompress content"


def load_batch_result(
    conn: sqlite3.Connection,
    batch_id: str,
    include_content: bool,
    limit: int,
    offset: int,
) -> Optional[BatchResult]:
    """Read a batch and one window of its pages, decompressing bodies.

    A body that fails to decompress is reported as a page error rather than
    raised.
    """
    batch = batches.get_batch(conn, batch_id)
    if batch is None:
        return None

    results: list[PageResult] = []
    for page in pages.list_pages(conn, batch_id, limit=limit, offset=offset):
        content: str | None = None
        error = page.error
        if include_content and page.has_content:
            stored = pages.get_page_content(conn, page.id)
            if stored is not None:
                try:
                    content = codec.decompress(stored.compressed_content)
                except CodecError:
                    logger.exception("Failed to decompress content for page %s", page.id)
                    error = error or DECOMPRESS_ERROR
        results.append(
            PageResult(
                id=page.id,
                url=page.url,
                depth=page.depth,
                status_code=page.status_code,
                links=page.links,
                error=error,
                duration_ms=page.duration_ms,
                content=content,
            )
        )
    return BatchResult(batch=batch, pages=results)


class CrawlStore:
    """Thread-safe async access to one SQLite connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        with self._lock:
            try:
                return fn(self._conn, *args, **kwargs)
            except sqlite3.Error as exc:
                raise StorageError(f"{fn.__name__} failed: {exc}") from exc

    async def _run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        return await asyncio.to_thread(self._call, fn, *args, **kwargs)

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------
    async def create_batch(self, seed_urls: list[str]) -> Batch:
        return await self._run(batches.create_batch, seed_urls)

    async def get_batch(self, batch_id: str) -> Optional[Batch]:
        return await self._run(batches.get_batch, batch_id)

    async def list_batches(
        self, status: Optional[BatchStatus] = None, limit: int = 50
    ) -> list[Batch]:
        return await self._run(batches.list_batches, status=status, limit=limit)

    async def update_status(
        self,
        batch_id: str,
        status: BatchStatus,
        error: Optional[str] = None,
    ) -> None:
        """Apply a status transition.

        A transition the current status does not allow is logged and
        ignored; it never moves a batch out of a terminal state.

        Raises:
            StorageError: If the write fails or the batch does not exist.
        """
        try:
            applied = await self._run(batches.update_batch_status, batch_id, status, error)
        except ValueError as exc:
            raise StorageError(str(exc)) from exc
        if not applied:
            logger.warning(
                "Ignored status change of batch %s to %s", batch_id, BatchStatus(status).value
            )

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------
    async def save(self, record: PageRecord) -> Page:
        return await self._run(pages.save_page, record)

    async def count_pages(self, batch_id: str) -> int:
        return await self._run(pages.count_pages, batch_id)

    async def get_batch_result(
        self,
        batch_id: str,
        include_content: bool = True,
        limit: int = 50,
        offset: int = 0,
    ) -> Optional[BatchResult]:
        """Return the batch plus one window of its pages, or ``None``."""
        return await self._run(
            load_batch_result, batch_id, include_content, limit, offset
        )
