from __future__ import annotations
import logging
from typing import Dict

import httpx

from docqa.core.entities import ProviderKind, QueryParams, UnifiedAnswerResponse
from docqa.core.errors import MalformedOutputError, ProviderError
from docqa.core.ports.provider import IAnswerProvider
from docqa.models.providers.adapt import page_refs_to_citations

logger = logging.getLogger("docqa.provider.chatpdf")

CHATPDF_BASE_URL = "https://api.chatpdf.com/v1"


class ChatPDFProvider(IAnswerProvider):
    """Third-party PDF Q&A. Its `references[].pageNumber` are structured page refs."""

    kind = ProviderKind.PDF_QA

    def __init__(self, client: httpx.AsyncClient, api_key: str | None, base_url: str = CHATPDF_BASE_URL):
        self.client = client
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._source_ids: Dict[str, str] = {}

    def is_available(self) -> bool:
        return bool(self.api_key)

    def clear_cache(self) -> None:
        self._source_ids.clear()

    async def _post(self, path: str, payload: dict) -> dict:
        try:
            r = await self.client.post(
                f"{self.base_url}{path}", json=payload,
                headers={"x-api-key": self.api_key or "", "Content-Type": "application/json"},
            )
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(self.kind.value, f"{path} returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderError(self.kind.value, f"{path} failed: {e}") from e
        try:
            data = r.json()
        except ValueError as e:
            raise MalformedOutputError(self.kind.value, f"{path} returned non-JSON body") from e
        if not isinstance(data, dict):
            raise MalformedOutputError(self.kind.value, f"{path} returned {type(data).__name__}")
        return data

    async def source_id(self, params: QueryParams) -> str:
        doc = params.document
        if doc.doc_id in self._source_ids:
            return self._source_ids[doc.doc_id]
        if not doc.url:
            raise ProviderError(self.kind.value, "document URL is required")
        data = await self._post("/sources/add-url", {"url": doc.url})
        sid = data.get("sourceId")
        if not sid:
            raise MalformedOutputError(self.kind.value, "add-url response has no sourceId")
        self._source_ids[doc.doc_id] = sid
        logger.info(f"📎 Registered {doc.doc_id} as ChatPDF source {sid}")
        return sid

    async def query(self, params: QueryParams) -> UnifiedAnswerResponse:
        if not self.api_key:
            raise ProviderError(self.kind.value, "ChatPDF API key missing")
        sid = await self.source_id(params)
        data = await self._post("/chats/message", {
            "sourceId": sid,
            "referenceSources": True,
            "messages": [{"role": "user", "content": params.question}],
        })
        content = data.get("content")
        if not isinstance(content, str) or not content.strip():
            raise MalformedOutputError(self.kind.value, "response has no content")

        pages = []
        for ref in data.get("references") or []:
            n = ref.get("pageNumber") if isinstance(ref, dict) else None
            if isinstance(n, int):
                pages.append(n)
        return UnifiedAnswerResponse(
            content=content,
            sources=page_refs_to_citations(pages),
            provider_used=self.kind,
        )
