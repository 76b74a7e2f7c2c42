"""Exception types raised by the crawler.

Transport failures are not wrapped: the fetcher lets ``httpx.RequestError``
subclasses propagate and the engine records their message on the page.
"""

from __future__ import annotations


class CrawlerError(Exception):
    """Base class for all crawler-specific errors."""


class CodecError(CrawlerError):
    """Compressing, decompressing or hashing page content failed."""


class StorageError(CrawlerError):
    """A persistence call (batch status update, page save, read) failed."""
