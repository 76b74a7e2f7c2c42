"""CRUD operations for the ``pages`` and ``page_contents`` tables."""

from __future__ import annotations

import json
import sqlite3
import uuid
from time import time
from typing import Optional

from crawler.db.models import Page, PageContent, PageRecord


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_page(row: sqlite3.Row) -> Page:
    return Page(
        id=row["id"],
        batch_id=row["batch_id"],
        url=row["url"],
        depth=row["depth"],
        status_code=row["status_code"],
        links=json.loads(row["links"] or "[]"),
        error=row["error"],
        duration_ms=row["duration_ms"],
        has_content=bool(row["has_content"]),
        created_at=row["created_at"],
    )


def _row_to_content(row: sqlite3.Row) -> PageContent:
    return PageContent(
        compressed_content=bytes(row["compressed_content"]),
        content_hash=row["content_hash"],
        original_size=row["original_size"],
        compressed_size=row["compressed_size"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def save_page(conn: sqlite3.Connection, record: PageRecord) -> Page:
    """Insert a page and, when present, its content in one transaction.

    Raises:
        sqlite3.IntegrityError: If the batch does not exist or the URL was
            already saved for this batch.
    """
    pid = str(uuid.uuid4())
    now = int(time())

    with conn:
        conn.execute(
            """
            INSERT INTO pages (id, batch_id, url, depth, status_code, links,
                               error, duration_ms, has_content, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                pid,
                record.batch_id,
                record.url,
                record.depth,
                record.status_code,
                json.dumps(record.links),
                record.error,
                record.duration_ms,
                int(record.has_content),
                now,
            ),
        )
        if record.content is not None:
            content = record.content
            conn.execute(
                """
                INSERT INTO page_contents (page_id, compressed_content, content_hash,
                                           original_size, compressed_size)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    pid,
                    content.compressed_content,
                    content.content_hash,
                    content.original_size,
                    content.compressed_size,
                ),
            )

    return get_page(conn, pid)  # type: ignore[return-value]


def get_page(conn: sqlite3.Connection, page_id: str) -> Optional[Page]:
    """Fetch a single page by its UUID.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM pages WHERE id = ?", (page_id,)).fetchone()
    return _row_to_page(row) if row else None


def list_pages(
    conn: sqlite3.Connection,
    batch_id: str,
    limit: int = 50,
    offset: int = 0,
) -> list[Page]:
    """Return a window of a batch's pages, shallowest first."""
    rows = conn.execute(
        """
        SELECT * FROM pages
         WHERE batch_id = ?
         ORDER BY depth ASC, created_at ASC, rowid ASC
         LIMIT ? OFFSET ?
        """,
        (batch_id, limit, offset),
    ).fetchall()
    return [_row_to_page(r) for r in rows]


def count_pages(conn: sqlite3.Connection, batch_id: str) -> int:
    row = conn.execute(
        "SELECT COUNT(*) FROM pages WHERE batch_id = ?", (batch_id,)
    ).fetchone()
    return row[0] if row else 0


def get_page_content(conn: sqlite3.Connection, page_id: str) -> Optional[PageContent]:
    """Return the stored content payload of a page, or ``None``."""
    row = conn.execute(
        "SELECT * FROM page_contents WHERE page_id = ?", (page_id,)
    ).fetchone()
    return _row_to_content(row) if row else None
