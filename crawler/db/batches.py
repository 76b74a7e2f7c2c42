"""CRUD operations for the ``batches`` table.

Status changes go through :func:`update_batch_status`, which only applies
forward transitions (PENDING → RUNNING → COMPLETED/FAILED).
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from time import time
from typing import Optional

from crawler.db.models import Batch, BatchStatus

# Target status -> statuses it may be entered from.
_ALLOWED_FROM: dict[BatchStatus, tuple[BatchStatus, ...]] = {
    BatchStatus.RUNNING: (BatchStatus.PENDING,),
    BatchStatus.COMPLETED: (BatchStatus.RUNNING,),
    BatchStatus.FAILED: (BatchStatus.PENDING, BatchStatus.RUNNING),
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_batch(row: sqlite3.Row) -> Batch:
    return Batch(
        id=row["id"],
        status=BatchStatus(row["status"]),
        created_at=row["created_at"],
        completed_at=row["completed_at"],
        error=row["error"],
        seed_urls=json.loads(row["seed_urls"] or "[]"),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def create_batch(
    conn: sqlite3.Connection,
    seed_urls: list[str],
    batch_id: Optional[str] = None,
) -> Batch:
    """Insert a new PENDING batch and return it.

    Args:
        conn: Open DB connection.
        seed_urls: Ordered seed list; stored as-is and never modified.
        batch_id: Explicit UUID override (auto-generated when omitted).
    """
    bid = batch_id or str(uuid.uuid4())
    now = int(time())

    with conn:
        conn.execute(
            """
            INSERT INTO batches (id, status, created_at, completed_at, error, seed_urls)
            VALUES (?, ?, ?, NULL, NULL, ?)
            """,
            (bid, BatchStatus.PENDING.value, now, json.dumps(list(seed_urls))),
        )

    return get_batch(conn, bid)  # type: ignore[return-value]


def get_batch(conn: sqlite3.Connection, batch_id: str) -> Optional[Batch]:
    """Fetch a single batch by its UUID.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM batches WHERE id = ?", (batch_id,)
    ).fetchone()
    return _row_to_batch(row) if row else None


def list_batches(
    conn: sqlite3.Connection,
    status: Optional[BatchStatus] = None,
    limit: int = 50,
) -> list[Batch]:
    """Return the most recent batches, optionally filtered by ``status``."""
    if status:
        rows = conn.execute(
            "SELECT * FROM batches WHERE status = ? ORDER BY created_at DESC, rowid DESC LIMIT ?",
            (BatchStatus(status).value, limit),
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM batches ORDER BY created_at DESC, rowid DESC LIMIT ?",
            (limit,),
        ).fetchall()
    return [_row_to_batch(r) for r in rows]


def update_batch_status(
    conn: sqlite3.Connection,
    batch_id: str,
    status: BatchStatus,
    error: Optional[str] = None,
) -> bool:
    """Move a batch to *status*.

    ``completed_at`` is stamped in the same statement when *status* is
    terminal.  *error* is only kept for ``FAILED``.

    Returns:
        ``True`` if the transition was applied, ``False`` if the batch's
        current status does not allow it (e.g. it is already terminal).

    Raises:
        ValueError: If the batch does not exist or *status* is ``PENDING``.
    """
    status = BatchStatus(status)
    if status not in _ALLOWED_FROM:
        raise ValueError(f"Cannot move a batch to {status.value!r}")

    sources = _ALLOWED_FROM[status]
    placeholders = ", ".join("?" for _ in sources)
    completed_at = int(time()) if status.is_terminal else None
    kept_error = error if status is BatchStatus.FAILED else None

    with conn:
        cursor = conn.execute(
            f"""
            UPDATE batches
               SET status = ?, error = ?, completed_at = ?
             WHERE id = ? AND status IN ({placeholders})
            """,  # noqa: S608
            (status.value, kept_error, completed_at, batch_id, *(s.value for s in sources)),
        )

    if cursor.rowcount == 0:
        if get_batch(conn, batch_id) is None:
            raise ValueError(f"Batch not found: {batch_id!r}")
        return False
    return True


def delete_batch(conn: sqlite3.Connection, batch_id: str) -> None:
    """Delete a batch (and its pages and their content via CASCADE).

    This is a no-op if the batch does not exist.
    """
    with conn:
        conn.execute("DELETE FROM batches WHERE id = ?", (batch_id,))
