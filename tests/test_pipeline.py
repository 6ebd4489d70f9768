"""Tests for the ingestion pipeline (split → extract → index → trace)."""

from __future__ import annotations

import sqlite3
from typing import Generator

import pytest

from wikidump.db.index import PageIndex, open_index
from wikidump.db.search import count_pages, get_page_by_title
from wikidump.db.trace import TraceSink, doc_totals, failure_counts, open_trace
from wikidump.pipeline import (
    INDEX_WRITE_FAILED,
    INDEX_WRITE_FAILED_CODE,
    ingest_dump,
    ingest_records,
)


# ---------------------------------------------------------------------------
# Fixtures / helpers
# ---------------------------------------------------------------------------

def _page(title: str, body: str, ns: str = "0", redirect: bool = False) -> str:
    redirect_line = '    <redirect title="X" />\n' if redirect else ""
    return (
        f"  <page>\n    <title>{title}</title>\n    <ns>{ns}</ns>\n"
        + redirect_line
        + f'    <revision><text xml:space="preserve">{body}</text></revision>\n  </page>\n'
    )


# doc 0: ok, doc 1: talk page, doc 2: redirect, doc 3: malformed,
# doc 4: ok, doc 5: bad namespace
_PAGES = [
    _page("Earth", "Third planet."),
    _page("Talk:Earth", "Discussion.", ns="1"),
    _page("Terra", "#REDIRECT [[Earth]]", redirect=True),
    "  <page>\n    <title>Broken</title>\n    <ns>0</ns>\n    <revision><text>x</revision>\n  </page>\n",
    _page("Mars", "Fourth planet."),
    _page("Odd", "Body.", ns="zero"),
]

_DUMP = "<mediawiki>\n  <siteinfo><sitename>Test</sitename></siteinfo>\n" + "".join(_PAGES) + "</mediawiki>\n"


@pytest.fixture()
def dump_path(tmp_path):
    path = tmp_path / "dump.xml"
    path.write_text(_DUMP, encoding="utf-8")
    return path


@pytest.fixture()
def index(tmp_path) -> Generator[PageIndex, None, None]:
    idx = open_index(tmp_path / "index", create=True)
    yield idx
    idx.close()


@pytest.fixture()
def trace(tmp_path) -> Generator[TraceSink, None, None]:
    sink = open_trace(tmp_path / "trace.db")
    yield sink
    sink.close()


# ---------------------------------------------------------------------------
# ingest_dump
# ---------------------------------------------------------------------------

class TestIngestDump:
    def test_default_policy(self, dump_path, index: PageIndex, trace: TraceSink) -> None:
        stats = ingest_dump(
            dump_path, index, trace, mainspace_only=True, skip_redirects=True
        )
        assert stats.records == 6
        assert stats.indexed == 2
        assert stats.redirects == 1
        assert stats.skipped_redirects == 1
        assert stats.failures == {
            "NON_MAINSPACE": 1,
            "MALFORMED_MARKUP": 1,
            "INVALID_NAMESPACE": 1,
        }
        assert stats.failed == 3
        assert count_pages(index.conn) == 2

    def test_document_ids_are_record_ordinals(self, dump_path, index: PageIndex) -> None:
        ingest_dump(dump_path, index, mainspace_only=True, skip_redirects=True)
        earth = get_page_by_title(index.conn, "Earth")
        mars = get_page_by_title(index.conn, "Mars")
        assert earth is not None and earth.id == 0
        assert mars is not None and mars.id == 4

    def test_trace_rows(self, dump_path, index: PageIndex, trace: TraceSink) -> None:
        ingest_dump(dump_path, index, trace, mainspace_only=True, skip_redirects=True)
        totals = doc_totals(trace.conn)
        assert totals.docs == 6
        assert totals.parsing_failed == 3
        assert totals.generation_failed == 0

        rows = trace.conn.execute(
            "SELECT id, doc_id, err_name, err_code FROM failures ORDER BY id"
        ).fetchall()
        assert [tuple(r) for r in rows] == [
            (0, 1, "NON_MAINSPACE", 4),
            (1, 3, "MALFORMED_MARKUP", 1),
            (2, 5, "INVALID_NAMESPACE", 3),
        ]

    def test_failed_flags_per_document(self, dump_path, index: PageIndex, trace: TraceSink) -> None:
        ingest_dump(dump_path, index, trace, mainspace_only=True, skip_redirects=True)
        rows = trace.conn.execute(
            "SELECT id, parsing_failed FROM docs ORDER BY id"
        ).fetchall()
        assert [(r[0], bool(r[1])) for r in rows] == [
            (0, False),
            (1, True),
            (2, False),
            (3, True),
            (4, False),
            (5, True),
        ]

    def test_all_namespaces(self, dump_path, index: PageIndex) -> None:
        stats = ingest_dump(dump_path, index, mainspace_only=False, skip_redirects=True)
        assert stats.indexed == 3
        assert "NON_MAINSPACE" not in stats.failures
        page = get_page_by_title(index.conn, "Talk:Earth")
        assert page is not None
        assert page.namespace == 1

    def test_keep_redirects(self, dump_path, index: PageIndex) -> None:
        stats = ingest_dump(dump_path, index, mainspace_only=True, skip_redirects=False)
        assert stats.indexed == 3
        assert stats.skipped_redirects == 0
        page = get_page_by_title(index.conn, "Terra")
        assert page is not None
        assert page.is_redirect is True

    def test_limit(self, dump_path, index: PageIndex, trace: TraceSink) -> None:
        stats = ingest_dump(dump_path, index, trace, mainspace_only=True, limit=2)
        assert stats.records == 2
        assert doc_totals(trace.conn).docs == 2

    def test_small_reads(self, dump_path, index: PageIndex) -> None:
        stats = ingest_dump(
            dump_path, index, mainspace_only=True, skip_redirects=True, read_size=7
        )
        assert stats.records == 6
        assert stats.indexed == 2

    def test_malformed_record_is_reported(self, dump_path, index: PageIndex, capsys) -> None:
        ingest_dump(dump_path, index, mainspace_only=True)
        out = capsys.readouterr().out
        assert "[Ingest] doc 3:" in out
        assert "[Ingest] done:" in out

    def test_progress_lines(self, dump_path, index: PageIndex, capsys, monkeypatch) -> None:
        monkeypatch.setattr("wikidump.pipeline.settings.progress_every", 2)
        ingest_dump(dump_path, index, mainspace_only=True)
        out = capsys.readouterr().out
        assert out.count("[Ingest] 2 records") == 1
        assert out.count("[Ingest] 4 records") == 1

    def test_settings_defaults(self, dump_path, index: PageIndex, monkeypatch) -> None:
        monkeypatch.setattr("wikidump.pipeline.settings.mainspace_only", False)
        monkeypatch.setattr("wikidump.pipeline.settings.skip_redirects", False)
        stats = ingest_dump(dump_path, index)
        assert stats.indexed == 4

    def test_missing_dump(self, tmp_path, index: PageIndex) -> None:
        with pytest.raises(FileNotFoundError):
            ingest_dump(tmp_path / "nope.xml", index)


# ---------------------------------------------------------------------------
# ingest_records / index write failures
# ---------------------------------------------------------------------------

class TestIndexWriteFailure:
    def test_write_failure_is_traced_and_run_continues(
        self, index: PageIndex, trace: TraceSink, monkeypatch
    ) -> None:
        real_add = PageIndex.add_page

        def flaky_add(self, doc_id, view):
            if doc_id == 0:
                raise sqlite3.OperationalError("disk I/O error")
            return real_add(self, doc_id, view)

        monkeypatch.setattr(PageIndex, "add_page", flaky_add)

        records = [p.strip().encode("utf-8") for p in (_PAGES[0], _PAGES[4])]
        stats = ingest_records(records, index, trace, mainspace_only=True)

        assert stats.indexed == 1
        assert stats.failures == {INDEX_WRITE_FAILED: 1}

        totals = doc_totals(trace.conn)
        assert totals.generation_failed == 1
        assert totals.parsing_failed == 0
        counts = failure_counts(trace.conn)
        assert [(c.err_name, c.err_code, c.count) for c in counts] == [
            (INDEX_WRITE_FAILED, INDEX_WRITE_FAILED_CODE, 1)
        ]

    def test_without_trace(self, index: PageIndex) -> None:
        stats = ingest_records([_PAGES[0].strip().encode("utf-8")], index)
        assert stats.records == 1
        assert stats.indexed == 1

    def test_empty_input(self, index: PageIndex, trace: TraceSink) -> None:
        stats = ingest_records([], index, trace)
        assert stats.records == 0
        assert stats.summary() == "0 records, 0 indexed, 0 redirects (0 skipped), 0 failed"
