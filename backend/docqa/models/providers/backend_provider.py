from __future__ import annotations
import logging
from typing import List

import httpx

from docqa.core.entities import Citation, ProviderKind, QueryParams, Relevance, UnifiedAnswerResponse
from docqa.core.errors import MalformedOutputError, ProviderError
from docqa.core.ports.provider import IAnswerProvider
from docqa.core.services.highlight import build_link

logger = logging.getLogger("docqa.provider.backend")


def _pick(obj: dict, keys: List[str]) -> str:
    for k in keys:
        v = obj.get(k)
        if isinstance(v, str) and v.strip():
            return v.strip()
    return ""


def _map_source(obj: dict, document_url: str | None) -> Citation | None:
    page = obj.get("page", obj.get("page_number", obj.get("pageNumber")))
    if not isinstance(page, int) or page < 1:
        return None
    text = _pick(obj, ["exactText", "exact_text", "content", "text"])
    relevance = obj.get("relevance") if obj.get("relevance") in ("high", "medium", "low") else "medium"
    return Citation(
        page=page,
        section=_pick(obj, ["section", "title"]) or f"Page {page}",
        exact_text=text,
        relevance=Relevance(relevance),
        context=_pick(obj, ["context", "content"]),
        highlight_url=build_link(document_url, page, text) if document_url and text else None,
    )


class BackendProvider(IAnswerProvider):
    """The organisation's own hosted Q&A backend."""

    kind = ProviderKind.BACKEND

    def __init__(self, client: httpx.AsyncClient, base_url: str | None):
        self.client = client
        self.base_url = (base_url or "").rstrip("/")

    def is_available(self) -> bool:
        return bool(self.base_url)

    async def query(self, params: QueryParams) -> UnifiedAnswerResponse:
        if not self.base_url:
            raise ProviderError(self.kind.value, "backend base URL not configured")
        payload = {
            "message": params.question,
            "document_id": params.document.doc_id,
            "document_url": params.document.url,
            "user_id": params.user_id,
            "limit": params.result_limit,
        }
        try:
            r = await self.client.post(f"{self.base_url}/query", json=payload)
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(self.kind.value, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderError(self.kind.value, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise MalformedOutputError(self.kind.value, "non-JSON body") from e

        if not isinstance(data, dict):
            raise MalformedOutputError(self.kind.value, f"unexpected body type {type(data).__name__}")
        content = _pick(data, ["response", "answer", "content"])
        if not content:
            raise MalformedOutputError(self.kind.value, "no answer text in response")

        sources = []
        for raw in data.get("sources") or []:
            if isinstance(raw, dict) and (c := _map_source(raw, params.document.url)):
                sources.append(c)
        logger.info(f"✅ Backend answered with {len(sources)} source(s)")
        return UnifiedAnswerResponse(content=content, sources=sources, provider_used=self.kind)
