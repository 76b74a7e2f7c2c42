"""Types shared by the crawl engine and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Union

from crawler.config import Settings
from crawler.db.models import BatchStatus, PageRecord
from crawler.scraper.models import FetchResult


@dataclass(frozen=True)
class CrawlerConfig:
    """Engine limits, fixed for the lifetime of the process.

    Attributes:
        concurrency: Process-wide ceiling on in-flight page tasks, shared by
            every batch.  Also the largest wave one batch dispatches at once.
        default_max_depth: Link-expansion depth used when a run names none.
        max_pages_per_batch: Hard cap on distinct URLs fetched by one batch.
    """

    concurrency: int = 50
    default_max_depth: int = 5
    max_pages_per_batch: int = 1000

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if self.default_max_depth < 0:
            raise ValueError("default_max_depth must not be negative")
        if self.max_pages_per_batch < 1:
            raise ValueError("max_pages_per_batch must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CrawlerConfig":
        return cls(
            concurrency=settings.crawler_concurrency,
            default_max_depth=settings.crawler_max_depth,
            max_pages_per_batch=settings.crawler_max_pages,
        )


@dataclass(frozen=True)
class CrawlTask:
    """One frontier entry: a URL and the BFS depth it was discovered at."""

    url: str
    depth: int


@dataclass
class TaskSuccess:
    """The page was fetched; ``next_tasks`` are its links one level deeper."""

    page: PageRecord
    next_tasks: list[CrawlTask] = field(default_factory=list)


@dataclass
class TaskFailure:
    """The fetch (or result assembly) failed; ``page.error`` says why."""

    page: PageRecord


TaskOutcome = Union[TaskSuccess, TaskFailure]


# ---------------------------------------------------------------------------
# Collaborator contracts
# ---------------------------------------------------------------------------

class Fetcher(Protocol):
    async def fetch(self, url: str) -> FetchResult: ...


class BatchStatusStore(Protocol):
    async def update_status(
        self, batch_id: str, status: BatchStatus, error: Optional[str] = None
    ) -> None: ...


class PageStore(Protocol):
    async def save(self, record: PageRecord) -> object: ...
