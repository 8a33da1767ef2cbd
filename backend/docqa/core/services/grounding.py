from __future__ import annotations
import logging
import re
from typing import Dict, List, Tuple
from dataclasses import replace

from docqa.core.entities import Citation, PageText

logger = logging.getLogger("docqa.grounding")

_WS = re.compile(r"\s+")


def _norm(s: str) -> str:
    return _WS.sub(" ", s or "").strip()


def rank_citations(citations: List[Citation]) -> List[Citation]:
    return sorted(citations, key=lambda c: (c.relevance.rank, c.page))


def verify_citations(citations: List[Citation], pages: List[PageText]) -> Tuple[List[Citation], bool]:
    """
    Check every quote against the page text it claims to come from.
    Unverifiable quotes are kept but flagged; the second value says whether any were.
    """
    by_page: Dict[int, str] = {p.page_number: _norm(p.content) for p in pages if p.extracted}
    out: List[Citation] = []
    any_unverified = False
    for c in citations:
        if not c.exact_text.strip():
            out.append(c)
            continue
        page_text = by_page.get(c.page)
        if page_text is not None and _norm(c.exact_text) in page_text:
            out.append(replace(c, verified=True))
            continue
        logger.warning(f"⚠️ Quote not found verbatim on page {c.page}: {c.exact_text[:80]!r}")
        any_unverified = True
        out.append(replace(c, verified=False))
    return out, any_unverified


def restrict_to_pages(citations: List[Citation], pages: List[PageText]) -> List[Citation]:
    allowed = {p.page_number for p in pages}
    kept = [c for c in citations if c.page in allowed]
    if len(kept) != len(citations):
        logger.warning(f"⚠️ Dropped {len(citations) - len(kept)} citation(s) pointing outside pages {sorted(allowed)}")
    return kept
