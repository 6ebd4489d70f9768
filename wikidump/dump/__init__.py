"""Dump reading package — split a dump stream into page records."""

from wikidump.dump.splitter import iter_dump, iter_page_records, open_dump

__all__ = ["iter_dump", "iter_page_records", "open_dump"]
