from __future__ import annotations
import re
from typing import List, Tuple

# [P3] inline markers, and [Page 3: 'quote'] / [Page 3: "quote"] page-tagged quotes
_PAGE_MARKER = re.compile(r"\[P(\d+)\]|\[Page (\d+):\s*[\"']([^\"']+)[\"']\]")
_PAGE_QUOTE = re.compile(r"\[Page (\d+):\s*[\"']([^\"']+)[\"']\]")
_LOOSE_QUOTE = re.compile(r"'([^']{20,})'")


def parse_references(answer_text: str) -> List[int]:
    """
    Page numbers cited in a model answer, in order of appearance.
    Repeats are kept; callers de-duplicate when they need to.
    """
    pages: List[int] = []
    for m in _PAGE_MARKER.finditer(answer_text or ""):
        n = int(m.group(1) or m.group(2))
        if n > 0:
            pages.append(n)
    return pages


def parse_page_quotes(answer_text: str) -> List[Tuple[int, str]]:
    return [
        (int(m.group(1)), m.group(2).strip())
        for m in _PAGE_QUOTE.finditer(answer_text or "")
        if int(m.group(1)) > 0
    ]


def parse_loose_quotes(answer_text: str, limit: int = 3) -> List[str]:
    return [m.group(1).strip() for m in _LOOSE_QUOTE.finditer(answer_text or "")][:limit]


def expand_page_range(pages: List[int]) -> List[int]:
    """min-1 .. max+1, never below page 1."""
    if not pages:
        return []
    lo = max(1, min(pages) - 1)
    hi = max(pages) + 1
    return list(range(lo, hi + 1))
