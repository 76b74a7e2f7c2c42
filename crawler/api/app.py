"""FastAPI application factory.

Lifespan
--------
On startup the app opens a single SQLite connection, initialises the schema
and wires the crawl stack onto ``app.state``:

    store        — :class:`~crawler.db.store.CrawlStore`
    fetcher      — :class:`~crawler.scraper.fetcher.PageFetcher` (one shared client)
    engine       — :class:`~crawler.engine.crawl.CrawlEngine` (one global gate)
    orchestrator — :class:`~crawler.engine.orchestrator.CrawlOrchestrator`

On shutdown it drains every running crawl before closing the HTTP client and
the connection.

Routers
-------
    /fetch     — submit crawls, read batch status and pages
    /health    — liveness plus the number of active crawls
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from crawler.config import configure_logging, settings
from crawler.db import CrawlStore, get_connection, init_db
from crawler.engine import CrawlEngine, CrawlerConfig, CrawlOrchestrator
from crawler.scraper import PageFetcher

from crawler.api.routers import batches as batches_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the crawl stack on startup; drain and close it on shutdown."""
    configure_logging(settings.log_level)
    conn = get_connection()
    init_db(conn)

    store = CrawlStore(conn)
    fetcher = PageFetcher.with_client(
        timeout=settings.http_timeout,
        max_redirects=settings.http_max_redirects,
        user_agent=settings.user_agent,
    )
    engine = CrawlEngine(CrawlerConfig.from_settings(settings), fetcher, store, store)

    app.state.db = conn
    app.state.store = store
    app.state.fetcher = fetcher
    app.state.engine = engine
    app.state.orchestrator = CrawlOrchestrator(engine, store)
    logger.info("Crawler service started (db=%s)", settings.db_path)
    try:
        yield
    finally:
        logger.info("Shutting down crawler service...")
        await app.state.orchestrator.drain()
        await fetcher.aclose()
        conn.close()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="URL Crawler API",
        description=(
            "Accepts seed URLs, crawls outward breadth-first up to a depth "
            "limit, and exposes batch status and fetched pages."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(batches_router.router, prefix="/fetch", tags=["fetch"])

    @app.get("/health", tags=["health"])
    def health(request: Request) -> dict[str, Any]:
        return {
            "status": "ok",
            "active_crawls": request.app.state.orchestrator.active_count,
        }

    return app


# Module-level instance used by uvicorn:
#   uvicorn crawler.api.app:app --reload
app = create_app()
