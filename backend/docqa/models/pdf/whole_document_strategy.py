# Fallback extraction: parse the whole document as one text stream, then cut it
# back into page-sized chunks. Page breaks are approximate: on documents with
# uneven page density text can land on a neighbouring page.
from __future__ import annotations
import io
import re
import warnings
from typing import List

from pypdf import PdfReader
from pypdf.errors import PdfReadWarning

from docqa.core.entities import PageText
from docqa.core.ports.extraction import IPageExtractionStrategy, StrategyOutcome

_SPACES = re.compile(r"[ \t\f\v\r]+")
_BLANK_LINES = re.compile(r"\n\s*\n+")
_TERMINATOR = re.compile(r"[.!?]")


def split_into_pages(text: str, total_pages: int, snap_ratio: float = 0.3) -> List[str]:
    """
    Equal-length chunks, each end pushed forward to the next sentence
    terminator when one lies within `snap_ratio` of a chunk length.
    """
    if total_pages <= 0:
        return []
    size = len(text) // total_pages
    pages: List[str] = []
    pos = 0
    for i in range(total_pages):
        if i == total_pages - 1:
            end = len(text)
        else:
            end = min(pos + size, len(text))
            if end < len(text):
                m = _TERMINATOR.search(text, end)
                if m and m.start() - end < size * snap_ratio:
                    end = m.start() + 1
        pages.append(text[pos:end].strip())
        pos = end
    return pages


class PypdfWholeDocumentStrategy(IPageExtractionStrategy):
    name = "pypdf-whole-document"

    def extract(self, data: bytes, pages: List[int]) -> StrategyOutcome:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", PdfReadWarning)
            reader = PdfReader(io.BytesIO(data), strict=False)
            count = len(reader.pages)
            raw = "\n".join((p.extract_text() or "") for p in reader.pages)
        text = _BLANK_LINES.sub("\n", _SPACES.sub(" ", raw)).strip()
        if not text:
            return StrategyOutcome(name=self.name, page_count=count, error="document has no extractable text")

        chunks = split_into_pages(text, count)
        out = [
            PageText(page_number=n, content=chunks[n - 1])
            for n in pages
            if 1 <= n <= count and chunks[n - 1]
        ]
        if not out:
            return StrategyOutcome(name=self.name, page_count=count, error="no text on requested pages")
        return StrategyOutcome(name=self.name, pages=out, page_count=count)
