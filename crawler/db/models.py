"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class BatchStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (BatchStatus.COMPLETED, BatchStatus.FAILED)


@dataclass
class Batch:
    id: str
    status: BatchStatus
    created_at: int
    completed_at: int | None
    error: str | None
    seed_urls: list[str] = field(default_factory=list)


@dataclass
class PageContent:
    compressed_content: bytes
    content_hash: str
    original_size: int
    compressed_size: int


@dataclass
class Page:
    id: str
    batch_id: str
    url: str
    depth: int
    status_code: int | None
    links: list[str]
    error: str | None
    duration_ms: int | None
    has_content: bool
    created_at: int


@dataclass
class PageRecord:
    """A page about to be persisted, with its optional content payload.

    Built by the crawl engine; the store assigns ``id`` and ``created_at``.
    """

    batch_id: str
    url: str
    depth: int
    status_code: int | None = None
    links: list[str] = field(default_factory=list)
    error: str | None = None
    duration_ms: int | None = None
    content: PageContent | None = None

    @property
    def has_content(self) -> bool:
        return self.content is not None


@dataclass
class PageResult:
    """A page as returned to readers, with its body decompressed."""

    id: str
    url: str
    depth: int
    status_code: int | None
    links: list[str]
    error: str | None
    duration_ms: int | None
    content: str | None


@dataclass
class BatchResult:
    batch: Batch
    pages: list[PageResult] = field(default_factory=list)
