from __future__ import annotations
import logging
import httpx

from docqa.core.entities import DocumentLocator
from docqa.core.errors import DocumentFetchError
from docqa.core.ports.documents import IDocumentFetcher

logger = logging.getLogger("docqa.fetch")


class HttpDocumentFetcher(IDocumentFetcher):
    """Downloads document bytes over HTTP with a shared httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch_bytes(self, document: DocumentLocator) -> bytes:
        if not document.url:
            raise DocumentFetchError(None, f"document {document.doc_id} has no URL")
        logger.info(f"🔄 Fetching PDF {document.doc_id} from {document.url}")
        try:
            r = await self.client.get(document.url, follow_redirects=True)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DocumentFetchError(document.url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DocumentFetchError(document.url, f"{type(e).__name__}: {e}") from e
        if not r.content:
            raise DocumentFetchError(document.url, "empty body")
        return r.content

    async def is_reachable(self, url: str) -> tuple[bool, str | None]:
        try:
            r = await self.client.head(url, follow_redirects=True)
        except httpx.HTTPError as e:
            return False, f"{type(e).__name__}: {e}"
        if r.is_success:
            return True, None
        return False, f"HTTP {r.status_code}: {r.reason_phrase}"
