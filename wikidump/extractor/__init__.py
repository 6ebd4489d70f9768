"""Page extractor package — one dump ``<page>`` record in, one result out."""

from wikidump.extractor.extractor import extract_page
from wikidump.extractor.models import ExtractResult, FailureKind, PageView, ParseFailure

__all__ = ["extract_page", "ExtractResult", "FailureKind", "PageView", "ParseFailure"]
