"""Page extraction: turns one raw ``<page>`` record into a :class:`PageView`.

The record is parsed into a light tree of byte spans (see
:mod:`wikidump.extractor.tree`), the fields are looked up first-match-only,
and the title/body are returned as ``memoryview`` slices of the caller's
buffer.  Every rejection is a returned :class:`ParseFailure`; nothing in
here raises for bad input and nothing is logged.
"""

from __future__ import annotations

import re
from typing import Union

from wikidump.extractor.models import ExtractResult, FailureKind, PageView, ParseFailure
from wikidump.extractor.tree import Element, MarkupError, parse_markup

MAINSPACE = 0

_NAMESPACE_RE = re.compile(rb"[0-9]+")
# XML whitespace: space, tab, CR, LF
_XML_WS = b" \t\r\n"

BytesLike = Union[bytes, bytearray, memoryview]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _content(buf: memoryview, element: Element) -> memoryview:
    return buf[element.content_start:element.content_end]


def _parse_namespace(raw: memoryview) -> int | None:
    """Parse the raw ``<ns>`` content as a base-10, non-negative integer.

    Surrounding XML whitespace is tolerated; signs, embedded spaces and any
    trailing characters are not.
    """
    text = bytes(raw).strip(_XML_WS)
    if not _NAMESPACE_RE.fullmatch(text):
        return None
    return int(text)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_page(record: BytesLike, mainspace_filter: bool = True) -> ExtractResult:
    """Extract redirect flag, namespace, title and body from one page record.

    Args:
        record: Markup of exactly one ``<page>`` element (any bytes-like
            object).  It must stay unmodified while the returned views are in
            use; the views hold a reference to it.
        mainspace_filter: Reject pages whose namespace is not ``0``.

    Returns:
        A :class:`PageView` on success, otherwise a :class:`ParseFailure`.
        Checks short-circuit in this order: markup, root element, ``ns``
        (presence, value, mainspace), ``title``, ``revision/text``.  The
        redirect marker is looked up before any of the required fields.

    Raises:
        TypeError: If *record* does not support the buffer protocol.
    """
    buf = memoryview(record)
    if buf.format != "B" or buf.ndim != 1:
        buf = buf.cast("B")

    try:
        page = parse_markup(buf)
    except MarkupError as exc:
        return ParseFailure(FailureKind.MALFORMED_MARKUP, f"XML parse error: {exc}")

    if page.name != "page":
        return ParseFailure(
            FailureKind.MALFORMED_MARKUP,
            f"root element is <{page.name}>, expected <page>",
        )

    is_redirect = page.first_child("redirect") is not None

    ns_node = page.first_child("ns")
    if ns_node is None:
        return ParseFailure(FailureKind.MISSING_NAMESPACE, "no <ns> element in page")

    namespace = _parse_namespace(_content(buf, ns_node))
    if namespace is None:
        shown = bytes(_content(buf, ns_node)[:32]).decode("utf-8", errors="replace")
        return ParseFailure(
            FailureKind.INVALID_NAMESPACE,
            f"namespace {shown!r} is not a non-negative integer",
        )
    if mainspace_filter and namespace != MAINSPACE:
        return ParseFailure(
            FailureKind.NON_MAINSPACE, f"namespace {namespace} is not mainspace"
        )

    title_node = page.first_child("title")
    if title_node is None:
        return ParseFailure(FailureKind.MISSING_TITLE, "no <title> element in page")

    revision = page.first_child("revision")
    text_node = revision.first_child("text") if revision is not None else None
    if text_node is None:
        missing = "<revision>" if revision is None else "<text> in <revision>"
        return ParseFailure(
            FailureKind.MISSING_REVISION_TEXT, f"no {missing} element in page"
        )

    return PageView(
        is_redirect=is_redirect,
        namespace=namespace,
        title=_content(buf, title_node),
        body=_content(buf, text_node),
        title_span=(title_node.content_start, title_node.content_end),
        body_span=(text_node.content_start, text_node.content_end),
    )
