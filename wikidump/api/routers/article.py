"""Article endpoint.

Routes
------
GET /api/article/{title}   Article wikitext as ``text/plain``
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from wikidump.db.search import get_page_by_title

router = APIRouter()


@router.get("/{title:path}", response_class=PlainTextResponse)
def get_article(request: Request, title: str) -> PlainTextResponse:
    """Return the body of the page titled *title*.

    URL slugs use underscores for spaces (``Ada_Lovelace``); the exact title
    is tried first, then the slug form.
    """
    conn = request.app.state.db
    page = get_page_by_title(conn, title)
    if page is None and "_" in title:
        page = get_page_by_title(conn, title.replace("_", " "))
    if page is None:
        raise HTTPException(status_code=404, detail=f"Article not found: {title!r}")
    return PlainTextResponse(page.body)
