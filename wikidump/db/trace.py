"""Per-document trace sink.

Records, for every processed dump record, whether parsing or index
generation failed (``docs`` table) and one row per failure with its name,
code and diagnostic text (``failures`` table), so a run over tens of millions
of pages can be analysed afterwards with plain SQL.

Rows are buffered in memory and written with ``executemany``.  Each buffer
is flushed once it holds more than ``flush_rows`` rows, and everything left
is flushed on :meth:`TraceSink.close`.  A failed flush raises
:class:`TraceFlushError` and keeps the rows buffered.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from types import TracebackType
from typing import Optional, Type, Union

from wikidump.config import settings
from wikidump.db.connection import get_connection
from wikidump.db.models import DocTotals, FailureCount

_CREATE_TABLES = """
DROP TABLE IF EXISTS docs;
DROP TABLE IF EXISTS failures;
CREATE TABLE docs (
    id                INTEGER PRIMARY KEY,
    parsing_failed    BOOL,
    generation_failed BOOL
);
CREATE TABLE failures (
    id       INTEGER PRIMARY KEY,
    doc_id   INTEGER,
    err_name VARCHAR NOT NULL,
    err_code INTEGER NOT NULL,
    err_ctx  VARCHAR NOT NULL
);
"""

_INSERT_DOC = "INSERT INTO docs (id, parsing_failed, generation_failed) VALUES (?, ?, ?)"
_INSERT_FAILURE = (
    "INSERT INTO failures (id, doc_id, err_name, err_code, err_ctx) VALUES (?, ?, ?, ?, ?)"
)


class TraceError(Exception):
    """Base class for trace sink failures."""


class TraceOpenError(TraceError):
    """The trace database could not be opened."""


class TraceSchemaError(TraceError):
    """The trace tables could not be created."""


class TraceFlushError(TraceError):
    """Buffered rows could not be written."""


class TraceSink:
    """Buffered writer for the ``docs`` and ``failures`` tables."""

    def __init__(self, conn: sqlite3.Connection, flush_rows: int) -> None:
        self._conn: Optional[sqlite3.Connection] = conn
        self.flush_rows = flush_rows
        self._docs: list[tuple] = []
        self._failures: list[tuple] = []
        self._next_failure_id = 0

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise ValueError("TraceSink is closed")
        return self._conn

    @property
    def closed(self) -> bool:
        return self._conn is None

    @property
    def pending_docs(self) -> int:
        return len(self._docs)

    @property
    def pending_failures(self) -> int:
        return len(self._failures)

    # ------------------------------------------------------------------
    # Appending
    # ------------------------------------------------------------------

    def insert_doc(self, doc_id: int, parsing_failed: bool, generation_failed: bool) -> None:
        """Buffer one ``docs`` row; may trigger a flush."""
        self.conn  # raises once closed
        self._docs.append((doc_id, parsing_failed, generation_failed))
        if len(self._docs) > self.flush_rows:
            self._flush_rows("docs", _INSERT_DOC, self._docs)

    def insert_failure(self, doc_id: int, err_code: int, err_name: str, err_ctx: str) -> int:
        """Buffer one ``failures`` row and return its (monotonic) failure id."""
        self.conn  # raises once closed
        failure_id = self._next_failure_id
        self._next_failure_id += 1
        self._failures.append((failure_id, doc_id, err_name, err_code, err_ctx))
        if len(self._failures) > self.flush_rows:
            self._flush_rows("failures", _INSERT_FAILURE, self._failures)
        return failure_id

    # ------------------------------------------------------------------
    # Flushing
    # ------------------------------------------------------------------

    def _flush_rows(self, table: str, sql: str, rows: list[tuple]) -> None:
        if not rows:
            return
        try:
            with self.conn:
                self.conn.executemany(sql, rows)
        except sqlite3.Error as exc:
            print(f"[Trace] {table} flush error: {exc}")
            raise TraceFlushError(f"Flushing {len(rows)} {table} row(s) failed: {exc}") from exc
        rows.clear()

    def flush(self) -> None:
        """Write both buffers now."""
        self._flush_rows("docs", _INSERT_DOC, self._docs)
        self._flush_rows("failures", _INSERT_FAILURE, self._failures)

    def close(self) -> None:
        """Flush everything and close the database.  Idempotent.

        Both buffers get a flush attempt and the connection is always closed;
        the first flush error is raised afterwards.
        """
        if self._conn is None:
            return
        errors: list[TraceFlushError] = []
        for table, sql, rows in (
            ("docs", _INSERT_DOC, self._docs),
            ("failures", _INSERT_FAILURE, self._failures),
        ):
            try:
                self._flush_rows(table, sql, rows)
            except TraceFlushError as exc:
                errors.append(exc)
        self._conn.close()
        self._conn = None
        if errors:
            raise errors[0]

    def __enter__(self) -> TraceSink:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def open_trace(db_path: Union[str, Path], flush_rows: Optional[int] = None) -> TraceSink:
    """Open *db_path* and (re)create the trace tables.

    Any existing ``docs``/``failures`` tables are dropped: one trace database
    describes one run.

    Raises:
        TraceOpenError: If the database cannot be opened.
        TraceSchemaError: If the tables cannot be created.
    """
    try:
        conn = get_connection(db_path)
    except sqlite3.Error as exc:
        raise TraceOpenError(f"Cannot open trace database {db_path}: {exc}") from exc

    try:
        conn.executescript(_CREATE_TABLES)
    except sqlite3.Error as exc:
        print(f"[Trace] create table failed: {exc}")
        conn.close()
        raise TraceSchemaError(f"Cannot create trace tables in {db_path}: {exc}") from exc

    return TraceSink(conn, flush_rows if flush_rows is not None else settings.trace_flush_rows)


def failure_counts(conn: sqlite3.Connection) -> list[FailureCount]:
    """Return failure totals per ``(err_name, err_code)``, most frequent first."""
    rows = conn.execute(
        """
        SELECT err_name, err_code, COUNT(*) AS n
        FROM   failures
        GROUP  BY err_name, err_code
        ORDER  BY n DESC, err_code
        """
    ).fetchall()
    return [FailureCount(err_name=r[0], err_code=r[1], count=r[2]) for r in rows]


def doc_totals(conn: sqlite3.Connection) -> DocTotals:
    """Return document counts from the ``docs`` table."""
    row = conn.execute(
        """
        SELECT COUNT(*),
               COALESCE(SUM(parsing_failed), 0),
               COALESCE(SUM(generation_failed), 0)
        FROM   docs
        """
    ).fetchone()
    return DocTotals(docs=row[0], parsing_failed=row[1], generation_failed=row[2])
