"""URL crawler CLI — entry-point for all backend operations.

Usage:
    python cli/main.py --help

Command groups:
    db      → database setup
    crawl   → run a crawl to completion in the foreground
    batch   → inspect stored batches and pages
    serve   → run the HTTP API
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from crawler.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import dataclasses
from typing import List, Optional

import typer

from crawler.config import configure_logging, settings
from crawler.db import CrawlStore, get_connection, init_db
from crawler.db.models import Batch
from crawler.engine import CrawlEngine, CrawlerConfig, CrawlOrchestrator
from crawler.scraper import PageFetcher

from cli.commands.batch import batch_app

app = typer.Typer(
    name="crawler",
    help="URL crawler CLI.",
    no_args_is_help=True,
)

# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")
app.add_typer(batch_app, name="batch")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Crawl command
# ---------------------------------------------------------------------------

async def _run_crawl(
    urls: list[str], config: CrawlerConfig, max_depth: Optional[int]
) -> tuple[Batch, int]:
    """Create a batch, crawl it through the orchestrator, return the outcome."""
    conn = get_connection()
    init_db(conn)
    store = CrawlStore(conn)
    fetcher = PageFetcher.with_client(
        timeout=settings.http_timeout,
        max_redirects=settings.http_max_redirects,
        user_agent=settings.user_agent,
    )
    try:
        engine = CrawlEngine(config, fetcher, store, store)
        orchestrator = CrawlOrchestrator(engine, store)

        batch = await store.create_batch(urls)
        orchestrator.schedule(batch.id, urls, max_depth)
        await orchestrator.drain()

        final = await store.get_batch(batch.id)
        return final, await store.count_pages(batch.id)  # type: ignore[return-value]
    finally:
        await fetcher.aclose()
        conn.close()


@app.command("crawl")
def crawl(
    urls: List[str] = typer.Argument(..., help="Seed URLs."),
    depth: Optional[int] = typer.Option(None, "--depth", help="Maximum link depth."),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", help="Page budget for this batch."),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="Parallel fetch ceiling."),
) -> None:
    """Crawl outward from the seed URLs and wait for the batch to finish."""
    configure_logging(settings.log_level)

    config = CrawlerConfig.from_settings(settings)
    overrides = {
        key: value
        for key, value in (("max_pages_per_batch", max_pages), ("concurrency", concurrency))
        if value is not None
    }
    try:
        config = dataclasses.replace(config, **overrides)
    except ValueError as exc:
        typer.echo(f"[crawl] Invalid option: {exc}")
        raise typer.Exit(1)

    typer.echo(f"[crawl] Crawling {len(urls)} seed(s) …")
    batch, page_count = asyncio.run(_run_crawl(list(urls), config, depth))

    typer.echo(f"[crawl] Batch {batch.id}  status={batch.status.value}  pages={page_count}")
    if batch.error:
        typer.echo(f"[crawl] error: {batch.error}")
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Serve command
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(settings.port, help="Bind port."),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    typer.echo(f"[serve] Listening on http://{host}:{port}")
    uvicorn.run("crawler.api.app:app", host=host, port=port)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
