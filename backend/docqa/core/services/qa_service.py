from __future__ import annotations
import logging
import uuid
from datetime import datetime, timezone
from typing import List

from docqa.core.entities import AnsweredQuestion, ExtractionResult, QARecord, QueryParams
from docqa.core.ports.store import IQARepository
from docqa.core.services.answer_router import AnswerServiceRouter
from docqa.core.services.citation_service import SourceExtractionService
from docqa.core.services.grounding import rank_citations

logger = logging.getLogger("docqa.qa")

PROVIDER_SOURCES_CONFIDENCE = 0.3


# ==========================================================
# 🧠 QA Service: answer → citations → (optional) repository
# ==========================================================
class QAService:
    """
    Document question answering that always returns the answer text when any
    provider succeeds. Citation failures only degrade the sources:
      - pipeline error → provider-native sources, confidence 0
      - pipeline found nothing → provider-native sources, low confidence
    """

    def __init__(
        self,
        router: AnswerServiceRouter,
        sources: SourceExtractionService,
        repository: IQARepository | None = None,
    ):
        self.router = router
        self.sources = sources
        self.repository = repository

    def _provider_sources(self, params: QueryParams, answer, confidence: float) -> ExtractionResult:
        sources = list(answer.sources)
        page_count = self.sources.page_count(params.document)
        if page_count is not None:
            kept = [c for c in sources if 1 <= c.page <= page_count]
            if len(kept) != len(sources):
                logger.warning(
                    f"⚠️ Dropped {len(sources) - len(kept)} provider source(s) outside pages 1-{page_count}"
                )
            sources = kept
        return ExtractionResult(
            sources=rank_citations(sources),
            confidence=confidence if sources else 0.0,
            strategy="provider",
            low_confidence=True,
        )

    async def _cite(self, params: QueryParams, answer) -> ExtractionResult:
        page_refs = [c.page for c in answer.sources] or None
        try:
            extraction = await self.sources.extract_sources(
                params.question, answer.content, params.document, page_refs
            )
        except Exception as e:
            logger.error(f"❌ Source extraction failed; keeping provider sources: {e}", exc_info=True)
            return self._provider_sources(params, answer, 0.0)
        if not extraction.sources and answer.sources:
            logger.warning("⚠️ No located citations; falling back to provider sources")
            fallback = self._provider_sources(params, answer, PROVIDER_SOURCES_CONFIDENCE)
            return fallback if fallback.sources else extraction
        return extraction

    async def ask(self, params: QueryParams) -> AnsweredQuestion:
        """Route → cite → respond. Provider errors propagate; citation errors don't."""
        answer = await self.router.query(params)
        logger.info(f"🧠 {answer.provider_used.value} answered ({len(answer.content)} chars)")
        extraction = await self._cite(params, answer)
        return AnsweredQuestion(answer=answer, extraction=extraction)

    def save(
        self,
        trial_id: str,
        question: str,
        result: AnsweredQuestion,
        tags: List[str] | None = None,
        created_by: str | None = None,
    ) -> QARecord:
        if self.repository is None:
            raise RuntimeError("Q&A repository not configured")
        record = QARecord(
            record_id=str(uuid.uuid4()),
            trial_id=trial_id,
            question=question,
            answer=result.answer.content,
            created_at=datetime.now(timezone.utc).isoformat(),
            tags=list(tags or []),
            source="ai",
            sources=list(result.extraction.sources),
            created_by=created_by,
        )
        return self.repository.add(record)
