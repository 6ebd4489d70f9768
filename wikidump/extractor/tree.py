"""Minimal markup tree over an expat event stream.

Only element names, attributes and the *byte span* of each element's content
are kept; character data is never copied out of the source buffer.  The span
of an element runs from the byte index of the first parser event after its
start tag up to the byte index of its end tag, so ``buffer[start:end]`` is the
raw markup between the tags (empty for ``<x/>`` and ``<x></x>``).

The tree is built with an explicit stack, never by recursion, so arbitrarily
deep nesting cannot exhaust the interpreter stack.
"""

from __future__ import annotations

from typing import Dict, List, Optional
from xml.parsers import expat


class MarkupError(Exception):
    """The buffer is not a parseable single-element markup fragment."""


class Element:
    __slots__ = ("name", "attrs", "children", "content_start", "content_end")

    def __init__(self, name: str, attrs: Dict[str, str]) -> None:
        self.name = name
        self.attrs = attrs
        self.children: List[Element] = []
        self.content_start = -1
        self.content_end = -1

    def first_child(self, name: str) -> Optional[Element]:
        """Return the first direct child called *name*, or ``None``."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def __repr__(self) -> str:
        return f"<Element {self.name} [{self.content_start}:{self.content_end}]>"


class _TreeBuilder:
    def __init__(self, parser: expat.XMLParserType) -> None:
        self._parser = parser
        self._stack: List[Element] = []
        # Element whose content start is still unknown.
        self._pending: Optional[Element] = None
        self.root: Optional[Element] = None

    def _mark(self) -> int:
        index = self._parser.CurrentByteIndex
        if self._pending is not None:
            self._pending.content_start = index
            self._pending = None
        return index

    def start(self, name: str, attrs: Dict[str, str]) -> None:
        self._mark()
        element = Element(name, attrs)
        if self._stack:
            self._stack[-1].children.append(element)
        else:
            self.root = element
        self._stack.append(element)
        self._pending = element

    def end(self, name: str) -> None:
        index = self._mark()
        element = self._stack.pop()
        element.content_end = index

    def event(self, *args: object) -> None:
        self._mark()

    def doctype(self, *args: object) -> None:
        raise MarkupError("document type declarations are not accepted")


def parse_markup(buffer: memoryview) -> Element:
    """Parse *buffer* and return its root element.

    Raises:
        MarkupError: On any parser error (message carries line/column), on a
            DOCTYPE, or when the buffer holds no element at all.
    """
    parser = expat.ParserCreate()
    builder = _TreeBuilder(parser)
    parser.StartElementHandler = builder.start
    parser.EndElementHandler = builder.end
    parser.CharacterDataHandler = builder.event
    parser.CommentHandler = builder.event
    parser.ProcessingInstructionHandler = builder.event
    parser.StartCdataSectionHandler = builder.event
    parser.StartDoctypeDeclHandler = builder.doctype

    try:
        parser.Parse(buffer, True)
    except expat.ExpatError as exc:
        raise MarkupError(str(exc)) from exc
    except (ValueError, OverflowError, MemoryError) as exc:
        raise MarkupError(f"{type(exc).__name__}: {exc}") from exc

    if builder.root is None:
        raise MarkupError("no element found")
    return builder.root
