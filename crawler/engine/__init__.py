"""Crawl engine package — BFS traversal, global gate, and scheduling."""

from crawler.engine.crawl import CrawlEngine
from crawler.engine.models import CrawlerConfig, CrawlTask, TaskFailure, TaskSuccess
from crawler.engine.orchestrator import CrawlOrchestrator

__all__ = [
    "CrawlEngine",
    "CrawlOrchestrator",
    "CrawlerConfig",
    "CrawlTask",
    "TaskSuccess",
    "TaskFailure",
]
