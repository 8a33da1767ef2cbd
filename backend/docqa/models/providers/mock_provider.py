from __future__ import annotations
import logging

from docqa.core.entities import ProviderKind, QueryParams, UnifiedAnswerResponse, Usage
from docqa.core.ports.provider import IAnswerProvider
from docqa.core.services.page_references import parse_page_quotes
from docqa.models.providers.adapt import quotes_to_citations

logger = logging.getLogger("docqa.provider.mock")

MOCK_USAGE = Usage(input_tokens=3210, output_tokens=312)


class MockProvider(IAnswerProvider):
    """Deterministic canned answer for demos and offline development."""

    kind = ProviderKind.MOCK

    def is_available(self) -> bool:
        return True

    def answer_text(self, params: QueryParams) -> str:
        name = params.document.name or "Document"
        return (
            f"Based on {name}, here is what the protocol says about \"{params.question.strip()}\".\n\n"
            "[Page 1: 'This protocol describes the objectives, design and conduct of the study']\n"
            "[Page 2: 'Eligibility criteria are listed in the inclusion and exclusion sections']\n\n"
            "Refer to the cited pages for the complete wording."
        )

    async def query(self, params: QueryParams) -> UnifiedAnswerResponse:
        content = self.answer_text(params)
        sources = quotes_to_citations(parse_page_quotes(content), params.document.url)
        logger.info(f"🧪 Mock answer with {len(sources)} citation(s)")
        return UnifiedAnswerResponse(
            content=content,
            sources=sources,
            provider_used=self.kind,
            usage=MOCK_USAGE,
            model="mock",
        )
