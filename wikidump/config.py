"""Centralised settings for the wikidump toolkit.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("WIKIDUMP_WORKSPACE", Path.home() / ".wikidump")
        )
    )

    @property
    def index_dir(self) -> Path:
        """Directory holding the SQLite page index."""
        return self.workspace_dir / "index"

    @property
    def trace_db_path(self) -> Path:
        """Absolute path to the per-document trace database."""
        return self.workspace_dir / "trace.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the index schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Extraction policy
    # ------------------------------------------------------------------
    mainspace_only: bool = field(
        default_factory=lambda: _env_flag("MAINSPACE_ONLY", "1")
    )
    skip_redirects: bool = field(
        default_factory=lambda: _env_flag("SKIP_REDIRECTS", "1")
    )

    # ------------------------------------------------------------------
    # Dump reading
    # ------------------------------------------------------------------
    dump_read_size: int = field(
        default_factory=lambda: int(os.environ.get("DUMP_READ_SIZE", str(1 << 20)))
    )
    progress_every: int = field(
        default_factory=lambda: int(os.environ.get("PROGRESS_EVERY", "10000"))
    )

    # ------------------------------------------------------------------
    # Index / trace batching
    # ------------------------------------------------------------------
    index_commit_rows: int = field(
        default_factory=lambda: int(os.environ.get("INDEX_COMMIT_ROWS", "1000"))
    )
    trace_flush_rows: int = field(
        default_factory=lambda: int(os.environ.get("TRACE_FLUSH_ROWS", "10000"))
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton, import this everywhere:
#   from wikidump.config import settings
settings = Settings()
