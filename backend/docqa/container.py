from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict

import httpx
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from docqa.core.entities import ProviderKind
from docqa.core.ports.provider import IAnswerProvider
from docqa.core.ports.store import IQARepository
from docqa.core.services.answer_router import AnswerServiceRouter, resolve_provider_kind
from docqa.core.services.citation_service import CitationLocator, SourceExtractionService
from docqa.core.services.document_probe import DocumentProbe
from docqa.core.services.qa_service import QAService
from docqa.core.services.text_extraction_service import PdfTextExtractor
from docqa.db.config import Settings
from docqa.db.session import DatabasePool
from docqa.models.fetch.http_document_fetcher import HttpDocumentFetcher
from docqa.models.matcher.keyword_matcher import KeywordOverlapMatcher
from docqa.models.matcher.llm_matcher import GroqMatcher, OpenAIMatcher
from docqa.models.pdf.layout_strategy import PypdfLayoutStrategy
from docqa.models.pdf.whole_document_strategy import PypdfWholeDocumentStrategy
from docqa.models.providers.anthropic_provider import AnthropicDocumentProvider
from docqa.models.providers.backend_provider import BackendProvider
from docqa.models.providers.chatpdf_provider import ChatPDFProvider
from docqa.models.providers.mock_provider import MockProvider
from docqa.models.store.inmemory_qa_store import InMemoryQARepository
from docqa.models.store.pg_qa_store import PgQARepository

logger = logging.getLogger("docqa.container")


@dataclass
class AppContainer:
    settings: Settings
    http_client: httpx.AsyncClient
    extractor: PdfTextExtractor
    locator: CitationLocator
    sources: SourceExtractionService
    router: AnswerServiceRouter
    providers: Dict[ProviderKind, IAnswerProvider]
    repository: IQARepository
    qa_service: QAService
    probe: DocumentProbe
    db: DatabasePool | None = None

    def clear_caches(self) -> None:
        """Drop cached page text and third-party source registrations."""
        self.extractor.clear_cache()
        for provider in self.providers.values():
            clear = getattr(provider, "clear_cache", None)
            if callable(clear):
                clear()

    async def aclose(self) -> None:
        await self.http_client.aclose()
        if self.db is not None:
            self.db.close()
        logger.info("🧹 Container resources released")


def _build_repository(settings: Settings) -> tuple[IQARepository, DatabasePool | None]:
    if settings.qa_store.strip().lower() == "postgres":
        db = DatabasePool(settings.database_url, settings.masked_database_url)
        db.init()
        logger.info("🔌 Using Postgres Q&A repository")
        return PgQARepository(db), db
    logger.info("🔌 Using in-memory Q&A repository")
    return InMemoryQARepository(), None


def build_container(settings: Settings, http_client: httpx.AsyncClient | None = None) -> AppContainer:
    """
    Wire every adapter once. Providers and matchers without credentials are
    still registered; they report themselves unavailable and get skipped.
    """
    client = http_client or httpx.AsyncClient(timeout=settings.http_timeout)
    fetcher = HttpDocumentFetcher(client)

    extractor = PdfTextExtractor(fetcher, [PypdfLayoutStrategy(), PypdfWholeDocumentStrategy()])

    openai_client = AsyncOpenAI(api_key=settings.openai_api_key) if settings.openai_api_key else None
    groq_client = (
        AsyncOpenAI(api_key=settings.groq_api_key, base_url=settings.groq_base_url)
        if settings.groq_api_key else None
    )
    locator = CitationLocator([
        OpenAIMatcher(openai_client, settings.openai_matcher_model,
                      max_tokens=settings.matcher_max_tokens, json_retries=settings.matcher_json_retries),
        GroqMatcher(groq_client, settings.groq_matcher_model, page_char_limit=settings.groq_page_char_limit,
                    max_tokens=settings.matcher_max_tokens, json_retries=settings.matcher_json_retries),
        KeywordOverlapMatcher(),
    ])
    sources = SourceExtractionService(extractor, locator)

    anthropic_client = AsyncAnthropic(api_key=settings.anthropic_api_key) if settings.anthropic_api_key else None
    providers: Dict[ProviderKind, IAnswerProvider] = {
        ProviderKind.DIRECT_LLM: AnthropicDocumentProvider(
            anthropic_client, fetcher, model=settings.anthropic_model, max_tokens=settings.matcher_max_tokens
        ),
        ProviderKind.PDF_QA: ChatPDFProvider(client, settings.chatpdf_api_key),
        ProviderKind.BACKEND: BackendProvider(client, settings.backend_api_base_url),
        ProviderKind.MOCK: MockProvider(),
    }
    router = AnswerServiceRouter(providers, resolve_provider_kind(settings.ai_service))

    repository, db = _build_repository(settings)
    qa_service = QAService(router, sources, repository)

    logger.info(
        f"✅ Container built | service={router.current_service().value} "
        f"| matchers={locator.available_matchers()}"
    )
    return AppContainer(
        settings=settings,
        http_client=client,
        extractor=extractor,
        locator=locator,
        sources=sources,
        router=router,
        providers=providers,
        repository=repository,
        qa_service=qa_service,
        probe=DocumentProbe(fetcher, extractor),
        db=db,
    )
