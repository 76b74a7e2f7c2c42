"""Database layer package.

Public re-exports so callers can write::

    from crawler.db import get_connection, init_db, CrawlStore
"""

from crawler.db.connection import get_connection
from crawler.db.migrations import init_db
from crawler.db.store import CrawlStore

__all__ = ["get_connection", "init_db", "CrawlStore"]
