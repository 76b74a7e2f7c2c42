"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from crawler.api import app

    uvicorn crawler.api:app --reload
"""

from crawler.api.app import app

__all__ = ["app"]
