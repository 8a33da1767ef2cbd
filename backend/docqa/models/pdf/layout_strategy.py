# Primary extraction: per-page text fragments re-assembled in reading order.
from __future__ import annotations
import io
import re
import warnings
from typing import List, Sequence, Tuple

from pypdf import PdfReader
from pypdf.errors import PdfReadWarning

from docqa.core.entities import PageText
from docqa.core.ports.extraction import IPageExtractionStrategy, StrategyOutcome

Fragment = Tuple[float, float, str]  # (x, y, text)

_WS = re.compile(r"\s+")


def order_fragments(fragments: Sequence[Fragment], line_tolerance: float = 5.0) -> str:
    """
    Top-to-bottom, then left-to-right. Fragments whose baselines sit within
    `line_tolerance` of the first fragment of a line belong to that line.
    """
    items = [f for f in fragments if f[2] and f[2].strip()]
    items.sort(key=lambda f: -f[1])
    lines: List[List[Fragment]] = []
    anchor_y = None
    for frag in items:
        if anchor_y is None or abs(anchor_y - frag[1]) > line_tolerance:
            lines.append([frag])
            anchor_y = frag[1]
        else:
            lines[-1].append(frag)
    parts = [f[2] for line in lines for f in sorted(line, key=lambda f: f[0])]
    return _WS.sub(" ", " ".join(parts)).strip()


class PypdfLayoutStrategy(IPageExtractionStrategy):
    name = "pypdf-layout"

    def __init__(self, line_tolerance: float = 5.0):
        self.line_tolerance = line_tolerance

    def _page_text(self, page) -> str:
        fragments: List[Fragment] = []

        def visitor(text, cm, tm, font_dict, font_size):
            x = tm[4] * cm[0] + tm[5] * cm[2] + cm[4]
            y = tm[4] * cm[1] + tm[5] * cm[3] + cm[5]
            fragments.append((x, y, text))

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", PdfReadWarning)
            page.extract_text(visitor_text=visitor)
        return order_fragments(fragments, self.line_tolerance)

    def extract(self, data: bytes, pages: List[int]) -> StrategyOutcome:
        reader = PdfReader(io.BytesIO(data))
        count = len(reader.pages)
        out: List[PageText] = []
        for n in pages:
            if n < 1 or n > count:
                continue
            text = self._page_text(reader.pages[n - 1])
            if text:
                out.append(PageText(page_number=n, content=text))
        if not out:
            return StrategyOutcome(name=self.name, page_count=count, error="no text on requested pages")
        return StrategyOutcome(name=self.name, pages=out, page_count=count)
