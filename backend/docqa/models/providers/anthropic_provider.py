from __future__ import annotations
import base64
import logging
from typing import List, Tuple

from anthropic import AnthropicError, AsyncAnthropic

from docqa.core.entities import ProviderKind, QueryParams, UnifiedAnswerResponse, Usage
from docqa.core.errors import ProviderError
from docqa.core.ports.documents import IDocumentFetcher
from docqa.core.ports.provider import IAnswerProvider
from docqa.core.services.page_references import parse_loose_quotes, parse_page_quotes
from docqa.models.providers.adapt import quotes_to_citations

logger = logging.getLogger("docqa.provider.anthropic")

SYSTEM_PROMPT = (
    "You are a document analyzer. You MUST identify the page number where each quote appears. "
    "Look at the page headers, footers, or page indicators in the PDF. Every quote MUST include "
    "its page number using the format [Page X: 'exact quote']."
)

CITATION_RULES = """

MANDATORY CITATION FORMAT:
1. You MUST provide page numbers for every quote
2. Look carefully at the document for page numbers (usually in headers/footers)
3. Use the exact format: [Page X: 'exact quote from the document']
4. If you see "Page X of Y" or similar indicators, use that page number
5. Every citation must have a page number - this is not optional

Find the relevant quotes in the document and identify their exact page locations."""


def native_page_quotes(content_blocks) -> List[Tuple[int, str]]:
    """page_location citations attached to text blocks by the Messages API."""
    quotes: List[Tuple[int, str]] = []
    for block in content_blocks or []:
        for cit in getattr(block, "citations", None) or []:
            if getattr(cit, "type", None) != "page_location":
                continue
            page = getattr(cit, "start_page_number", None)
            text = getattr(cit, "cited_text", "") or ""
            if isinstance(page, int):
                quotes.append((page, text.strip()))
    return quotes


class AnthropicDocumentProvider(IAnswerProvider):
    """
    Sends the PDF itself (base64 document block) to Claude and asks for
    page-tagged quotes. The document bytes are fetched once per query.
    """

    kind = ProviderKind.DIRECT_LLM

    def __init__(self, client: AsyncAnthropic | None, fetcher: IDocumentFetcher,
                 model: str = "claude-3-5-haiku-20241022", max_tokens: int = 2000):
        self.client = client
        self.fetcher = fetcher
        self.model = model
        self.max_tokens = max_tokens

    def is_available(self) -> bool:
        return self.client is not None

    async def _encoded_document(self, params: QueryParams) -> str:
        # DocumentFetchError propagates untouched
        data = await self.fetcher.fetch_bytes(params.document)
        encoded = base64.standard_b64encode(data).decode("ascii")
        logger.info(f"✅ PDF converted to base64: {len(encoded)} characters")
        return encoded

    async def query(self, params: QueryParams) -> UnifiedAnswerResponse:
        if self.client is None:
            raise ProviderError(self.kind.value, "Anthropic API key missing")
        encoded = await self._encoded_document(params)

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{
                    "role": "user",
                    "content": [
                        {"type": "document",
                         "source": {"type": "base64", "media_type": "application/pdf", "data": encoded},
                         "citations": {"enabled": True}},
                        {"type": "text", "text": params.question + CITATION_RULES},
                    ],
                }],
            )
        except AnthropicError as e:
            raise ProviderError(self.kind.value, f"{type(e).__name__}: {e}") from e

        blocks = list(response.content or [])
        content = "".join(getattr(b, "text", "") or "" for b in blocks if getattr(b, "type", None) == "text")
        if not content.strip():
            raise ProviderError(self.kind.value, "empty answer")

        quotes = native_page_quotes(blocks) or parse_page_quotes(content)
        if not quotes:
            loose = parse_loose_quotes(content)
            logger.info(f"📝 No page-tagged quotes; {len(loose)} page-less quote(s) ignored")

        usage = getattr(response, "usage", None)
        return UnifiedAnswerResponse(
            content=content,
            sources=quotes_to_citations(quotes, params.document.url),
            provider_used=self.kind,
            usage=Usage(usage.input_tokens, usage.output_tokens) if usage else None,
            model=getattr(response, "model", self.model),
        )
