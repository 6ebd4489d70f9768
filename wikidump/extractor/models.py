"""Result types for the page extractor.

``extract_page`` returns either a :class:`PageView` or a
:class:`ParseFailure`; callers branch on ``result.ok`` (or ``isinstance``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple, Union


class FailureKind(IntEnum):
    """Closed set of reasons a page record can be rejected.

    The integer values are stable: they are written to the trace database as
    ``err_code``.
    """

    MALFORMED_MARKUP = 1
    MISSING_NAMESPACE = 2
    INVALID_NAMESPACE = 3
    NON_MAINSPACE = 4
    MISSING_TITLE = 5
    MISSING_REVISION_TEXT = 6


# XML references only: the five predefined entities and numeric character
# references, replaced in a single pass so "&amp;lt;" decodes to "&lt;".
_XML_REF = re.compile(r"&(?:#x([0-9A-Fa-f]+)|#([0-9]+)|(amp|lt|gt|quot|apos));")
_XML_ENTITIES = {"amp": "&", "lt": "<", "gt": ">", "quot": '"', "apos": "'"}


def _replace_ref(match: re.Match[str]) -> str:
    hex_digits, dec_digits, name = match.groups()
    if name is not None:
        return _XML_ENTITIES[name]
    return chr(int(hex_digits, 16) if hex_digits is not None else int(dec_digits))


def _decode(raw: memoryview) -> str:
    return _XML_REF.sub(_replace_ref, bytes(raw).decode("utf-8", errors="replace"))


@dataclass(frozen=True)
class PageView:
    """A successfully extracted page.

    ``title`` and ``body`` are :class:`memoryview` slices over the record
    buffer handed to ``extract_page``: no bytes are copied, and the views keep
    that buffer alive.  The content is raw markup, so XML character
    references (``&amp;``, ``&lt;`` ...) are still encoded; use
    :attr:`title_text` / :attr:`body_text` for decoded strings.
    """

    is_redirect: bool
    namespace: int
    title: memoryview
    body: memoryview
    title_span: Tuple[int, int]
    body_span: Tuple[int, int]

    ok = True

    @property
    def title_text(self) -> str:
        """Decoded, unescaped title (copies)."""
        return _decode(self.title)

    @property
    def body_text(self) -> str:
        """Decoded, unescaped article body (copies)."""
        return _decode(self.body)


@dataclass(frozen=True)
class ParseFailure:
    """Why a record produced no :class:`PageView`."""

    kind: FailureKind
    detail: str

    ok = False

    @property
    def name(self) -> str:
        return self.kind.name

    @property
    def code(self) -> int:
        return int(self.kind)


ExtractResult = Union[PageView, ParseFailure]
