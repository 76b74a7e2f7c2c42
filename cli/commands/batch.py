"""Batch commands for inspecting crawl results."""

from __future__ import annotations

from typing import Optional

import typer

from crawler.db import get_connection, init_db
from crawler.db.batches import list_batches
from crawler.db.models import BatchStatus
from crawler.db.pages import count_pages
from crawler.db.store import load_batch_result

batch_app = typer.Typer(help="Inspect crawl batches.", no_args_is_help=True)


@batch_app.command("list")
def batch_list(
    status: Optional[BatchStatus] = typer.Option(None, "--status", help="Filter by status."),
    limit: int = typer.Option(20, help="Maximum number of batches to show."),
) -> None:
    """List the most recent batches."""
    conn = get_connection()
    init_db(conn)
    try:
        batches = list_batches(conn, status=status, limit=limit)
        if not batches:
            typer.echo("[batch list] No batches found.")
            return
        for b in batches:
            typer.echo(
                f"  {b.id}  [{b.status.value}]  pages={count_pages(conn, b.id)}  "
                f"seeds={len(b.seed_urls)}"
            )
    finally:
        conn.close()


@batch_app.command("show")
def batch_show(
    batch_id: str = typer.Argument(..., help="Batch UUID."),
    limit: int = typer.Option(50, help="Maximum number of pages to show."),
    offset: int = typer.Option(0, help="Number of pages to skip."),
    content: bool = typer.Option(False, "--content/--no-content", help="Print page bodies."),
) -> None:
    """Show a batch's status and its pages, shallowest first."""
    conn = get_connection()
    init_db(conn)
    try:
        result = load_batch_result(conn, batch_id, content, limit, offset)
    finally:
        conn.close()

    if result is None:
        typer.echo(f"[batch show] Batch not found: {batch_id}")
        raise typer.Exit(code=1)

    batch = result.batch
    typer.echo(f"[batch show] {batch.id}  status={batch.status.value}")
    if batch.error:
        typer.echo(f"[batch show] error: {batch.error}")
    for page in result.pages:
        outcome = page.error if page.error else f"HTTP {page.status_code}"
        typer.echo(f"  d{page.depth}  {page.url}  {outcome}  links={len(page.links)}")
        if content and page.content:
            typer.echo(page.content)
