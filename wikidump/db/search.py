"""Keyword search and article lookup over the page index.

``fts_search``
    Full-text search via SQLite FTS5 (porter-stemmed keyword match), titles
    weighted above bodies.

``get_page_by_title``
    Exact title lookup, as used by the article endpoint.
"""

from __future__ import annotations

import re
import sqlite3
from typing import Optional

from wikidump.db.models import Article, SearchHit

# bm25 column weights: (title, body)
_TITLE_WEIGHT = 10.0
_BODY_WEIGHT = 1.0


# ---------------------------------------------------------------------------
# FTS5 helpers
# ---------------------------------------------------------------------------

def _sanitize_fts_query(text: str) -> Optional[str]:
    """Convert a natural-language string into a safe FTS5 query expression.

    FTS5 treats punctuation (quotes, colons, hyphens, parentheses ...) as
    query syntax, so raw titles such as ``"Rock 'n' Roll: A History"`` would
    raise ``OperationalError: fts5: syntax error``.

    Strategy: extract word tokens (two characters or more), wrap each in
    double quotes (FTS5 phrase literals) and join them with spaces (implicit
    AND).  Returns ``None`` when no token survives.
    """
    tokens = re.findall(r"\w{2,}", text)
    seen: set[str] = set()
    unique: list[str] = []
    for token in tokens:
        key = token.lower()
        if key not in seen:
            seen.add(key)
            unique.append(token)
    if not unique:
        return None
    return " ".join(f'"{t}"' for t in unique)


def _row_to_hit(row: sqlite3.Row) -> SearchHit:
    return SearchHit(
        id=row["id"],
        title=row["title"],
        namespace=row["namespace"],
        is_redirect=bool(row["is_redirect"]),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def fts_search(
    conn: sqlite3.Connection,
    query: str,
    top_k: int = 10,
    offset: int = 0,
) -> list[SearchHit]:
    """Return up to *top_k* pages matching *query*, skipping the first *offset*."""
    fts_query = _sanitize_fts_query(query)
    if fts_query is None:
        return []

    rows = conn.execute(
        """
        SELECT p.id, p.title, p.namespace, p.is_redirect
        FROM   pages_fts f
        JOIN   pages p ON p.id = f.rowid
        WHERE  pages_fts MATCH ?
        ORDER  BY bm25(pages_fts, ?, ?), p.id
        LIMIT  ? OFFSET ?
        """,
        (fts_query, _TITLE_WEIGHT, _BODY_WEIGHT, top_k, offset),
    ).fetchall()
    return [_row_to_hit(r) for r in rows]


def get_page_by_title(conn: sqlite3.Connection, title: str) -> Optional[Article]:
    """Fetch the page whose title is exactly *title*.  Returns ``None`` if absent."""
    row = conn.execute(
        "SELECT * FROM pages WHERE title = ? ORDER BY id LIMIT 1", (title,)
    ).fetchone()
    if row is None:
        return None
    return Article(
        id=row["id"],
        title=row["title"],
        namespace=row["namespace"],
        is_redirect=bool(row["is_redirect"]),
        body=row["body"],
    )


def count_pages(conn: sqlite3.Connection) -> int:
    """Return the number of indexed pages."""
    return conn.execute("SELECT COUNT(*) FROM pages").fetchone()[0]
