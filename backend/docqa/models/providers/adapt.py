from __future__ import annotations
from typing import Iterable, List, Tuple

from docqa.core.entities import Citation, Relevance
from docqa.core.services.highlight import build_link


def quotes_to_citations(quotes: Iterable[Tuple[int, str]], document_url: str | None) -> List[Citation]:
    """(page, quote) pairs from a provider → citations; page-less quotes are dropped."""
    out: List[Citation] = []
    for page, text in quotes:
        if page < 1:
            continue
        out.append(Citation(
            page=page,
            section=f"Page {page}",
            exact_text=text,
            relevance=Relevance.HIGH,
            context=text,
            highlight_url=build_link(document_url, page, text) if document_url and text else None,
        ))
    return out


def page_refs_to_citations(pages: Iterable[int]) -> List[Citation]:
    seen: List[int] = []
    for p in pages:
        if p >= 1 and p not in seen:
            seen.append(p)
    return [
        Citation(page=p, section=f"Page {p}", exact_text="", relevance=Relevance.MEDIUM,
                 context=f"Reference from page {p}")
        for p in seen
    ]
