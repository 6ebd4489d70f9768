"""Page index initialisation.

``init_db(conn)`` is idempotent — safe to call on an existing index.
"""

from __future__ import annotations

import sqlite3

from wikidump.config import settings

SCHEMA_VERSION = 1


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_schema() -> str:
    """Load schema.sql from the package."""
    return settings.schema_path.read_text(encoding="utf-8")


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    """Create the schema-version table and record the current version."""
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version    INTEGER PRIMARY KEY,
                applied_at INTEGER DEFAULT (strftime('%s', 'now'))
            )
            """
        )
        conn.execute(
            "INSERT OR IGNORE INTO schema_version(version) VALUES (?)",
            (SCHEMA_VERSION,),
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def init_db(conn: sqlite3.Connection) -> None:
    """Create the ``pages`` table, its FTS5 mirror and the sync triggers.

    Every DDL statement uses ``IF NOT EXISTS`` so calling this on an existing
    index is safe.
    """
    # executescript() splits the trigger bodies correctly and issues an
    # implicit COMMIT first, which is fine for a DDL-only script.
    conn.executescript(_read_schema())
    _ensure_version_table(conn)


def current_version(conn: sqlite3.Connection) -> int:
    """Return the highest recorded schema version (0 if none)."""
    row = conn.execute(
        "SELECT COALESCE(MAX(version), 0) FROM schema_version"
    ).fetchone()
    return row[0] if row else 0
