from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from docqa.core.entities import DocumentLocator, PageText
from docqa.core.errors import DocumentFetchError
from docqa.core.ports.documents import IDocumentFetcher
from docqa.core.ports.extraction import IPageExtractionStrategy, StrategyOutcome

logger = logging.getLogger("docqa.extract")


def placeholder_page(page: int) -> PageText:
    return PageText(
        page_number=page,
        content=(
            f"Unable to extract specific content from page {page}. "
            "This document may have complex formatting or access restrictions."
        ),
        extracted=False,
    )


@dataclass
class _CachedDocument:
    page_count: Optional[int] = None
    pages: Dict[int, PageText] = field(default_factory=dict)


class DocumentTextCache:
    """
    Session-scoped page text, keyed by document id.
    Placeholders are never stored, so a later request can retry extraction.
    """

    def __init__(self) -> None:
        self._docs: Dict[str, _CachedDocument] = {}

    def entry(self, doc_id: str) -> _CachedDocument:
        return self._docs.setdefault(doc_id, _CachedDocument())

    def peek(self, doc_id: str) -> _CachedDocument | None:
        return self._docs.get(doc_id)

    def clear(self, doc_id: str | None = None) -> None:
        if doc_id is None:
            self._docs.clear()
        else:
            self._docs.pop(doc_id, None)

    def __len__(self) -> int:
        return len(self._docs)


class PdfTextExtractor:
    """
    Page text for a document, via an ordered ladder of extraction strategies.
    Strategies run one at a time; each later strategy is only asked for the
    pages that earlier ones left without text. Pages no strategy could read
    come back as placeholders (extracted=False).
    """

    def __init__(
        self,
        fetcher: IDocumentFetcher,
        strategies: List[IPageExtractionStrategy],
        cache: DocumentTextCache | None = None,
    ):
        self.fetcher = fetcher
        self.strategies = strategies
        self.cache = cache or DocumentTextCache()

    def clear_cache(self, doc_id: str | None = None) -> None:
        self.cache.clear(doc_id)
        logger.info("🗑️ Page text cache cleared")

    def page_count(self, doc_id: str) -> int | None:
        entry = self.cache.peek(doc_id)
        return entry.page_count if entry else None

    async def extract(self, document: DocumentLocator, pages: List[int]) -> List[PageText]:
        wanted = [p for p in dict.fromkeys(pages) if p >= 1]
        for p in pages:
            if p < 1:
                logger.warning(f"⚠️ Page {p} out of range for {document.doc_id}; skipped")

        entry = self.cache.peek(document.doc_id)
        if entry and entry.page_count is not None:
            wanted = self._in_range(document, wanted, entry.page_count)

        missing = [p for p in wanted if not (entry and p in entry.pages)]
        if missing:
            await self._populate(document, missing)
            entry = self.cache.peek(document.doc_id)
            if entry and entry.page_count is not None:
                wanted = self._in_range(document, wanted, entry.page_count)
        else:
            logger.debug(f"📋 Cache hit for {document.doc_id} pages {wanted}")

        cached = entry.pages if entry else {}
        return [cached.get(p) or placeholder_page(p) for p in wanted]

    def _in_range(self, document: DocumentLocator, pages: List[int], page_count: int) -> List[int]:
        kept = []
        for p in pages:
            if p > page_count:
                logger.warning(f"⚠️ Page {p} out of range (1-{page_count}) for {document.doc_id}; skipped")
                continue
            kept.append(p)
        return kept

    async def _populate(self, document: DocumentLocator, pages: List[int]) -> None:
        try:
            data = await self.fetcher.fetch_bytes(document)
        except DocumentFetchError as e:
            logger.warning(f"⚠️ {e}; no extraction strategy can run")
            return

        entry = self.cache.entry(document.doc_id)
        remaining = list(pages)
        for strategy in self.strategies:
            if not remaining:
                break
            outcome = await self._run(strategy, data, remaining)
            if outcome.page_count is not None:
                entry.page_count = outcome.page_count
                remaining = [p for p in remaining if p <= outcome.page_count]
            if not outcome.ok:
                logger.warning(f"⚠️ Extraction strategy {outcome.name} failed: {outcome.error}")
                continue
            for page in outcome.pages:
                if page.page_number in remaining and page.content.strip():
                    entry.pages[page.page_number] = page
            got = [p for p in remaining if p in entry.pages]
            remaining = [p for p in remaining if p not in entry.pages]
            logger.info(f"✅ {outcome.name} extracted pages {got} of {document.doc_id}")
        if remaining:
            logger.error(f"❌ No extraction strategy yielded pages {remaining} of {document.doc_id}; using placeholders")

    async def _run(self, strategy: IPageExtractionStrategy, data: bytes, pages: List[int]) -> StrategyOutcome:
        try:
            return await asyncio.to_thread(strategy.extract, data, pages)
        except Exception as e:
            return StrategyOutcome(name=strategy.name, error=f"{type(e).__name__}: {e}")
