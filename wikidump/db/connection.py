"""SQLite connection factory.

Usage::

    from wikidump.db.connection import get_connection

    conn = get_connection(index_dir / "pages.db")
    cursor = conn.execute("SELECT 1")
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Union


def get_connection(db_path: Union[str, Path]) -> sqlite3.Connection:
    """Open and configure a SQLite connection.

    Steps performed on every new connection:
    1. Set ``row_factory`` to :class:`sqlite3.Row` so columns can be accessed
       by name.
    2. Switch to WAL journal mode so readers (API, CLI search) do not block
       the ingest writer.

    Args:
        db_path: Database file, or ``":memory:"``.

    Raises:
        sqlite3.OperationalError: If the file cannot be opened.
    """
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row

    # PRAGMAs
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA synchronous = NORMAL")

    return conn
