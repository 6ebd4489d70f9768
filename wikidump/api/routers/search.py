"""Search endpoints — FTS5 keyword search and index statistics.

Routes
------
GET /api/search?q=<query>&top_k=10&offset=0
GET /api/stats
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel

from wikidump.db.search import count_pages, fts_search

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------

class SearchHitResponse(BaseModel):
    id: int
    title: str
    namespace: int
    is_redirect: bool


class StatsResponse(BaseModel):
    pages: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/search", response_model=list[SearchHitResponse])
def search(
    request: Request,
    q: str,
    top_k: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> list[SearchHitResponse]:
    """Search page titles and bodies.

    Args:
        q: Search query string.
        top_k: Maximum number of results to return.
        offset: Number of leading results to skip (pagination).
    """
    conn = request.app.state.db
    hits = fts_search(conn, q, top_k=top_k, offset=offset)
    return [
        SearchHitResponse(
            id=h.id, title=h.title, namespace=h.namespace, is_redirect=h.is_redirect
        )
        for h in hits
    ]


@router.get("/stats", response_model=StatsResponse)
def stats(request: Request) -> StatsResponse:
    """Return the number of indexed pages."""
    return StatsResponse(pages=count_pages(request.app.state.db))
