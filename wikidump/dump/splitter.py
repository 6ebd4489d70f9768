"""Dump splitter: cut a MediaWiki XML dump into ``<page>`` records.

The splitter does not parse XML.  It scans the byte stream for the literal
``<page>`` / ``</page>`` markers (page bodies are escaped in dumps, so the
markers never occur inside article text) and hands each record over as one
contiguous ``bytes`` object, ready for
:func:`~wikidump.extractor.extract_page`.
"""

from __future__ import annotations

import bz2
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from wikidump.config import settings

_PAGE_OPEN = b"<page>"
_PAGE_CLOSE = b"</page>"


def open_dump(path: Union[str, Path]) -> BinaryIO:
    """Open a dump file for binary reading; ``.bz2`` files are decompressed on the fly.

    Raises:
        FileNotFoundError: If *path* is not an existing file.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Dump file not found: {path}")
    if path.suffix == ".bz2":
        return bz2.open(path, "rb")  # type: ignore[return-value]
    return open(path, "rb")


def iter_page_records(
    stream: BinaryIO,
    read_size: Optional[int] = None,
) -> Iterator[bytes]:
    """Yield every ``<page>``...``</page>`` record (markers included) in *stream*.

    Records may straddle read boundaries.  Bytes outside of pages
    (``<mediawiki>``, ``<siteinfo>``, whitespace) are discarded.  A record
    that is still open at end of stream is yielded as-is, so the extractor
    reports it as malformed instead of it vanishing.
    """
    read_size = read_size or settings.dump_read_size
    buf = bytearray()
    pos = 0      # next scan position in buf
    start = -1   # start of the open record, -1 when between records

    while True:
        chunk = stream.read(read_size)
        if not chunk:
            break

        # Drop the consumed prefix before appending.
        cut = start if start >= 0 else pos
        if cut:
            del buf[:cut]
            pos -= cut
            if start >= 0:
                start = 0
        buf += chunk

        while True:
            if start < 0:
                start = buf.find(_PAGE_OPEN, pos)
                if start < 0:
                    # A marker may be split across reads: rescan its length - 1.
                    pos = max(pos, len(buf) - len(_PAGE_OPEN) + 1)
                    break
                pos = start + len(_PAGE_OPEN)

            end = buf.find(_PAGE_CLOSE, pos)
            if end < 0:
                pos = max(pos, len(buf) - len(_PAGE_CLOSE) + 1)
                break

            stop = end + len(_PAGE_CLOSE)
            yield bytes(buf[start:stop])
            start = -1
            pos = stop

    if start >= 0:
        yield bytes(buf[start:])


def iter_dump(path: Union[str, Path], read_size: Optional[int] = None) -> Iterator[bytes]:
    """Open *path* with :func:`open_dump` and yield its page records."""
    with open_dump(path) as stream:
        yield from iter_page_records(stream, read_size)
