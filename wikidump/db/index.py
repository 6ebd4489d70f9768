"""Page index writer.

``open_index(index_dir)`` returns a :class:`PageIndex` handle over
``<index_dir>/pages.db``; ``close()`` commits and releases it.  Pages are
written straight from a :class:`~wikidump.extractor.PageView`, so the
title/body are decoded exactly once, here, on their way into SQLite.
"""

from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from types import TracebackType
from typing import Optional, Type, Union

from wikidump.config import settings
from wikidump.db.connection import get_connection
from wikidump.db.migrations import init_db
from wikidump.extractor.models import PageView

INDEX_DB_NAME = "pages.db"

_UPSERT_PAGE = """
    INSERT INTO pages (id, title, namespace, is_redirect, body)
    VALUES (?, ?, ?, ?, ?)
    ON CONFLICT(id) DO UPDATE SET
        title       = excluded.title,
        namespace   = excluded.namespace,
        is_redirect = excluded.is_redirect,
        body        = excluded.body
"""


class IndexOpenError(Exception):
    """The index directory is missing, inaccessible or holds an unusable database."""


class PageIndex:
    """An open page index.  Use as a context manager or call :meth:`close`."""

    def __init__(self, conn: sqlite3.Connection, index_dir: Path, commit_rows: int) -> None:
        self._conn: Optional[sqlite3.Connection] = conn
        self.index_dir = index_dir
        self.commit_rows = max(1, commit_rows)
        self._uncommitted = 0

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ValueError("PageIndex is closed")
        return self._conn

    @property
    def closed(self) -> bool:
        return self._conn is None

    def add_page(self, doc_id: int, view: PageView) -> None:
        """Insert (or replace) the page stored under *doc_id*.

        Raises:
            sqlite3.Error: If the write fails; the caller decides whether to
                skip the document or abort.
        """
        self.conn.execute(
            _UPSERT_PAGE,
            (doc_id, view.title_text, view.namespace, int(view.is_redirect), view.body_text),
        )
        self._uncommitted += 1
        if self._uncommitted >= self.commit_rows:
            self.commit()

    def commit(self) -> None:
        self.conn.commit()
        self._uncommitted = 0

    def close(self) -> None:
        """Commit pending pages and close the connection.  Idempotent."""
        if self._conn is None:
            return
        try:
            self._conn.commit()
        finally:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> PageIndex:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


def open_index(
    index_dir: Union[str, Path],
    create: bool = False,
    commit_rows: Optional[int] = None,
) -> PageIndex:
    """Open (and initialise) the page index stored in *index_dir*.

    Args:
        index_dir: Directory holding ``pages.db``.
        create: Create *index_dir* (and parents) when missing.
        commit_rows: Pages per transaction.  Defaults to
            ``settings.index_commit_rows``.

    Raises:
        IndexOpenError: If the directory cannot be used or SQLite fails to
            open/initialise the database.
    """
    path = Path(index_dir)

    if create:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IndexOpenError(f"Cannot create index directory {path}: {exc}") from exc

    if not path.exists():
        raise IndexOpenError(f"Index directory not found: {path}")
    if not path.is_dir():
        raise IndexOpenError(f"Index path is not a directory: {path}")
    if not os.access(path, os.R_OK | os.W_OK | os.X_OK):
        raise IndexOpenError(f"Index directory is not accessible: {path}")

    try:
        conn = get_connection(path / INDEX_DB_NAME)
    except sqlite3.Error as exc:
        raise IndexOpenError(f"Cannot open index database in {path}: {exc}") from exc

    try:
        init_db(conn)
    except sqlite3.Error as exc:
        conn.close()
        raise IndexOpenError(f"Cannot initialise index database in {path}: {exc}") from exc

    return PageIndex(conn, path, commit_rows or settings.index_commit_rows)
