"""Database initialisation.

``init_db(conn)`` is idempotent — safe to call on an existing database.
"""

from __future__ import annotations

import sqlite3

from crawler.config import settings


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def init_db(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes.

    This function is **idempotent**: every DDL statement uses ``IF NOT EXISTS``
    so calling it multiple times on the same database is safe.
    """
    sql = settings.schema_path.read_text(encoding="utf-8")
    # executescript() issues an implicit COMMIT first, fine for DDL-only scripts.
    conn.executescript(sql)
