"""FastAPI application factory.

Lifespan
--------
On startup the app opens the page index (``settings.index_dir``, created if
missing) and shares its connection across requests via
``request.app.state.db``.  On shutdown it closes the index cleanly.

Routers
-------
    /api/search, /api/stats   — keyword search and index statistics
    /api/article/{title}      — raw article wikitext
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wikidump.config import settings
from wikidump.db.index import open_index

from wikidump.api.routers import article as article_router
from wikidump.api.routers import search as search_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the page index on startup and close it on shutdown."""
    index = open_index(settings.index_dir, create=True)
    app.state.index = index
    app.state.db = index.conn
    try:
        yield
    finally:
        index.close()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="wikidump API",
        description=(
            "Read-only HTTP interface over a page index built from a wiki "
            "XML dump: keyword search and article lookup."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(search_router.router, prefix="/api", tags=["search"])
    app.include_router(article_router.router, prefix="/api/article", tags=["article"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn wikidump.api.app:app --reload
app = create_app()
