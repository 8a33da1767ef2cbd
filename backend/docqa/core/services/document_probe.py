from __future__ import annotations
import logging
from dataclasses import dataclass

from docqa.core.entities import DocumentLocator
from docqa.core.ports.documents import IDocumentFetcher
from docqa.core.services.text_extraction_service import PdfTextExtractor

logger = logging.getLogger("docqa.probe")


@dataclass(frozen=True)
class ProbeReport:
    can_fetch: bool
    extraction_ok: bool
    page_count: int | None = None
    preview: str | None = None
    error: str | None = None
    recommendation: str = ""


class DocumentProbe:
    """Can we reach the document, and does page 1 yield text?"""

    def __init__(self, fetcher: IDocumentFetcher, extractor: PdfTextExtractor, preview_chars: int = 500):
        self.fetcher = fetcher
        self.extractor = extractor
        self.preview_chars = preview_chars

    async def run(self, document: DocumentLocator) -> ProbeReport:
        if not document.url:
            return ProbeReport(False, False, error="document has no URL",
                               recommendation="Provide a fetchable document URL")
        can_fetch, error = await self.fetcher.is_reachable(document.url)
        if not can_fetch:
            logger.warning(f"⚠️ Document {document.doc_id} not reachable: {error}")
            return ProbeReport(False, False, error=error,
                               recommendation="Check storage permissions or serve the PDF through a proxy")

        pages = await self.extractor.extract(document, [1])
        page_count = self.extractor.page_count(document.doc_id)
        if not pages or not pages[0].extracted:
            return ProbeReport(True, False, page_count=page_count, error="no text could be extracted from page 1",
                               recommendation="Document may be scanned or restricted; citations will be page-only")
        text = pages[0].content
        preview = text[: self.preview_chars] + ("..." if len(text) > self.preview_chars else "")
        return ProbeReport(True, True, page_count=page_count, preview=preview,
                           recommendation="Direct text extraction will work")
