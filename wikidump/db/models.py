"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer builds them
from :class:`sqlite3.Row` results.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SearchHit:
    id: int
    title: str
    namespace: int
    is_redirect: bool


@dataclass
class Article:
    id: int
    title: str
    namespace: int
    is_redirect: bool
    body: str


@dataclass
class FailureCount:
    err_name: str
    err_code: int
    count: int


@dataclass
class DocTotals:
    docs: int
    parsing_failed: int
    generation_failed: int
