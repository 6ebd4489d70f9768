"""Storage package: the SQLite page index and the trace database.

Public re-exports so callers can write::

    from wikidump.db import open_index, open_trace
"""

from wikidump.db.connection import get_connection
from wikidump.db.index import IndexOpenError, PageIndex, open_index
from wikidump.db.migrations import init_db
from wikidump.db.trace import TraceError, TraceSink, open_trace

__all__ = [
    "get_connection",
    "init_db",
    "IndexOpenError",
    "PageIndex",
    "open_index",
    "TraceError",
    "TraceSink",
    "open_trace",
]
