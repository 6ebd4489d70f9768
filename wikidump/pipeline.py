"""Dump ingestion pipeline.

``ingest_dump`` orchestrates the full run from a dump file to a populated
page index:

    split → extract → (filter redirects) → index → trace

The document id of a record is its 0-based ordinal in the dump.
"""

from __future__ import annotations

import sqlite3
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from wikidump.config import settings
from wikidump.db.index import PageIndex
from wikidump.db.trace import TraceSink
from wikidump.dump.splitter import iter_dump
from wikidump.extractor import FailureKind, ParseFailure, extract_page

# Failure recorded when an extracted page cannot be written to the index.
INDEX_WRITE_FAILED = "INDEX_WRITE_FAILED"
INDEX_WRITE_FAILED_CODE = 100


@dataclass
class IngestStats:
    records: int = 0
    indexed: int = 0
    redirects: int = 0
    skipped_redirects: int = 0
    failures: Counter = field(default_factory=Counter)

    @property
    def failed(self) -> int:
        return sum(self.failures.values())

    def summary(self) -> str:
        return (
            f"{self.records} records, {self.indexed} indexed, "
            f"{self.redirects} redirects ({self.skipped_redirects} skipped), "
            f"{self.failed} failed"
        )


def ingest_records(
    records: Iterable[bytes],
    index: PageIndex,
    trace: Optional[TraceSink] = None,
    mainspace_only: Optional[bool] = None,
    skip_redirects: Optional[bool] = None,
    limit: Optional[int] = None,
) -> IngestStats:
    """Extract, index and trace every record in *records*.

    Args:
        records: Raw page records, e.g. from
            :func:`~wikidump.dump.splitter.iter_dump`.
        index: Open page index receiving the successfully extracted pages.
        trace: Optional trace sink; gets one ``docs`` row per record and one
            ``failures`` row per failure.
        mainspace_only: Reject non-mainspace pages.  Defaults to
            ``settings.mainspace_only``.
        skip_redirects: Leave redirect pages out of the index.  Defaults to
            ``settings.skip_redirects``.
        limit: Stop after this many records.

    Returns:
        The run's :class:`IngestStats`.

    Raises:
        wikidump.db.trace.TraceFlushError: If the trace sink cannot write.
    """
    if mainspace_only is None:
        mainspace_only = settings.mainspace_only
    if skip_redirects is None:
        skip_redirects = settings.skip_redirects

    stats = IngestStats()
    progress_every = settings.progress_every

    for doc_id, record in enumerate(records):
        if limit is not None and doc_id >= limit:
            break
        stats.records += 1
        parsing_failed = generation_failed = False

        result = extract_page(record, mainspace_filter=mainspace_only)

        if isinstance(result, ParseFailure):
            parsing_failed = True
            stats.failures[result.name] += 1
            if trace is not None:
                trace.insert_failure(doc_id, result.code, result.name, result.detail)
            if result.kind is FailureKind.MALFORMED_MARKUP:
                print(f"[Ingest] doc {doc_id}: {result.detail}")
        else:
            if result.is_redirect:
                stats.redirects += 1
            if result.is_redirect and skip_redirects:
                stats.skipped_redirects += 1
            else:
                try:
                    index.add_page(doc_id, result)
                    stats.indexed += 1
                except sqlite3.Error as exc:
                    generation_failed = True
                    stats.failures[INDEX_WRITE_FAILED] += 1
                    print(f"[Ingest] doc {doc_id}: index write failed: {exc}")
                    if trace is not None:
                        trace.insert_failure(
                            doc_id, INDEX_WRITE_FAILED_CODE, INDEX_WRITE_FAILED, str(exc)
                        )

        if trace is not None:
            trace.insert_doc(doc_id, parsing_failed, generation_failed)

        if progress_every and stats.records % progress_every == 0:
            print(f"[Ingest] {stats.summary()}")

    index.commit()
    if trace is not None:
        trace.flush()
    print(f"[Ingest] done: {stats.summary()}")
    return stats


def ingest_dump(
    dump_path: Union[str, Path],
    index: PageIndex,
    trace: Optional[TraceSink] = None,
    mainspace_only: Optional[bool] = None,
    skip_redirects: Optional[bool] = None,
    limit: Optional[int] = None,
    read_size: Optional[int] = None,
) -> IngestStats:
    """Split *dump_path* into page records and run :func:`ingest_records` on them.

    Raises:
        FileNotFoundError: If *dump_path* does not exist.
    """
    print(f"[Ingest] Reading {dump_path}")
    return ingest_records(
        iter_dump(dump_path, read_size),
        index,
        trace=trace,
        mainspace_only=mainspace_only,
        skip_redirects=skip_redirects,
        limit=limit,
    )
