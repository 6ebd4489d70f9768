"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from wikidump.api import app

    uvicorn wikidump.api:app --reload
"""

from wikidump.api.app import app

__all__ = ["app"]
