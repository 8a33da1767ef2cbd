from __future__ import annotations
import logging
from dataclasses import replace
from typing import List, Optional

from docqa.core.entities import DocumentLocator, ExtractionResult, PageText
from docqa.core.ports.matcher import ISourceMatcher, MatchOutcome
from docqa.core.services.grounding import rank_citations, restrict_to_pages, verify_citations
from docqa.core.services.highlight import build_link
from docqa.core.services.page_references import expand_page_range, parse_references
from docqa.core.services.text_extraction_service import PdfTextExtractor

logger = logging.getLogger("docqa.citations")

UNVERIFIED_CONFIDENCE_CAP = 0.5


# ==========================================================
# 📍 Citation Locator
# ==========================================================
class CitationLocator:
    """
    Runs the matcher ladder (best model first, keyword heuristic last) and
    post-processes whatever wins: out-of-range pages dropped, quotes verified
    against page text, links attached, citations ranked.
    """

    def __init__(self, matchers: List[ISourceMatcher]):
        self.matchers = matchers

    def available_matchers(self) -> List[str]:
        return [m.name for m in self.matchers if m.is_available()]

    async def _try(self, matcher: ISourceMatcher, question: str, answer: str, pages: List[PageText]) -> MatchOutcome:
        if not matcher.is_available():
            return MatchOutcome(name=matcher.name, error="not configured")
        try:
            result = await matcher.match(question, answer, pages)
        except Exception as e:
            return MatchOutcome(name=matcher.name, error=f"{type(e).__name__}: {e}")
        return MatchOutcome(name=matcher.name, result=result)

    async def locate(
        self,
        question: str,
        answer: str,
        pages: List[PageText],
        document_url: str | None = None,
    ) -> ExtractionResult:
        if not pages:
            return ExtractionResult.empty()

        winner: Optional[MatchOutcome] = None
        for matcher in self.matchers:
            outcome = await self._try(matcher, question, answer, pages)
            if outcome.ok:
                winner = outcome
                break
            logger.warning(f"⚠️ Source matcher {outcome.name} unavailable or failed: {outcome.error}")
        if winner is None:
            logger.error("❌ Every source matcher failed")
            return ExtractionResult.empty()

        return self._finalize(winner.result, pages, document_url)

    def _finalize(self, result: ExtractionResult, pages: List[PageText], document_url: str | None) -> ExtractionResult:
        sources = restrict_to_pages(result.sources, pages)
        sources, unverified = verify_citations(sources, pages)
        if document_url:
            sources = [
                c.with_link(build_link(document_url, c.page, c.exact_text)) if c.exact_text else c
                for c in sources
            ]
        sources = rank_citations(sources)

        confidence = max(0.0, min(1.0, result.confidence))
        if not sources:
            confidence = 0.0
        elif unverified:
            confidence = min(confidence, UNVERIFIED_CONFIDENCE_CAP)

        logger.info(
            f"✅ {result.strategy}: {len(sources)} sources, confidence={confidence:.2f}"
            + (" (unverified quotes)" if unverified else "")
        )
        return replace(result, sources=sources, confidence=confidence, low_confidence=unverified)


# ==========================================================
# 🔎 Source extraction pipeline
# ==========================================================
class SourceExtractionService:
    """page refs → expanded page range → page text → located citations."""

    def __init__(self, extractor: PdfTextExtractor, locator: CitationLocator):
        self.extractor = extractor
        self.locator = locator

    def page_count(self, document: DocumentLocator) -> int | None:
        """Page count of the document, once any extraction has opened it."""
        return self.extractor.page_count(document.doc_id)

    async def extract_sources(
        self,
        question: str,
        answer: str,
        document: DocumentLocator,
        page_refs: List[int] | None = None,
    ) -> ExtractionResult:
        pages = list(page_refs) if page_refs else parse_references(answer)
        if not pages:
            logger.info("⚠️ Answer cites no pages; no sources to extract")
            return ExtractionResult.empty()

        expanded = expand_page_range(pages)
        logger.info(f"📄 Cited pages {pages}; extracting {expanded[0]}-{expanded[-1]}")
        page_texts = await self.extractor.extract(document, expanded)
        return await self.locator.locate(question, answer, page_texts, document.url)
