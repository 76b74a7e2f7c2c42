"""Crawl batch endpoints.

Routes
------
POST /fetch                 Body: {"urls": [...], "max_depth": 2}   → schedule a crawl
GET  /fetch                 Recent batches (optional ?status= filter)
GET  /fetch/{batch_id}      Batch status plus a page window
                            (?limit=50&offset=0&include_content=true)
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field, HttpUrl

from crawler.db.models import Batch, BatchResult, BatchStatus
from crawler.errors import StorageError

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class FetchRequest(BaseModel):
    urls: list[HttpUrl] = Field(..., min_length=1)
    max_depth: Optional[int] = Field(default=None, ge=1, le=10)


class FetchResponse(BaseModel):
    batch_id: str


class BatchSummary(BaseModel):
    batch_id: str
    status: BatchStatus
    created_at: int
    completed_at: Optional[int]
    error: Optional[str]
    seed_urls: list[str]


class PageResponse(BaseModel):
    id: str
    url: str
    depth: int
    status_code: Optional[int]
    links: list[str]
    error: Optional[str]
    duration_ms: Optional[int]
    content: Optional[str]


class BatchResultResponse(BatchSummary):
    pages: list[PageResponse]


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _batch_dict(batch: Batch) -> dict[str, Any]:
    return {
        "batch_id": batch.id,
        "status": batch.status,
        "created_at": batch.created_at,
        "completed_at": batch.completed_at,
        "error": batch.error,
        "seed_urls": batch.seed_urls,
    }


def _result_dict(result: BatchResult) -> dict[str, Any]:
    data = _batch_dict(result.batch)
    data["pages"] = [
        {
            "id": p.id,
            "url": p.url,
            "depth": p.depth,
            "status_code": p.status_code,
            "links": p.links,
            "error": p.error,
            "duration_ms": p.duration_ms,
            "content": p.content,
        }
        for p in result.pages
    ]
    return data


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=FetchResponse, status_code=201)
async def submit_fetch(body: FetchRequest, request: Request) -> dict[str, Any]:
    """Create a PENDING batch and start crawling it in the background.

    Returns as soon as the batch row exists; progress is read via
    ``GET /fetch/{batch_id}``.
    """
    store = request.app.state.store
    urls = [str(u) for u in body.urls]
    try:
        batch = await store.create_batch(urls)
    except StorageError as exc:
        raise HTTPException(status_code=503, detail=f"Could not create batch: {exc}") from exc

    request.app.state.orchestrator.schedule(batch.id, urls, body.max_depth)
    return {"batch_id": batch.id}


@router.get("", response_model=list[BatchSummary])
async def list_batches_endpoint(
    request: Request,
    status: Optional[BatchStatus] = None,
    limit: int = Query(50, ge=1, le=500),
) -> list[dict[str, Any]]:
    """Return the most recent batches, newest first."""
    batches = await request.app.state.store.list_batches(status=status, limit=limit)
    return [_batch_dict(b) for b in batches]


@router.get("/{batch_id}", response_model=BatchResultResponse)
async def get_batch_endpoint(
    batch_id: str,
    request: Request,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    include_content: bool = True,
) -> dict[str, Any]:
    """Return a batch's status and one window of its pages."""
    result = await request.app.state.store.get_batch_result(
        batch_id, include_content=include_content, limit=limit, offset=offset
    )
    if result is None:
        raise HTTPException(status_code=404, detail=f"Batch '{batch_id}' not found.")
    return _result_dict(result)
