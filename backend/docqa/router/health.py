# backend/docqa/router/health.py
from __future__ import annotations
import logging

from fastapi import APIRouter, Depends

from docqa.container import AppContainer
from docqa.core.entities import ProviderKind
from docqa.db.deps import get_container
from docqa.models.schemas import DocumentIn, ProbeResponse, StatusResponse

router = APIRouter()
logger = logging.getLogger("docqa.api.health")


@router.get("/health")
async def health_check():
    """Liveness only."""
    return {"status": "ok"}


@router.get("/status", response_model=StatusResponse)
def service_status(container: AppContainer = Depends(get_container)):
    """Selected AI service, availability of each, and usable source matchers."""
    r = container.router
    db_status = None
    if container.db is not None:
        ok, message = container.db.ping()
        db_status = {"ok": ok, "message": message}
    return StatusResponse(
        service=r.current_service().value,
        services={k.value: r.is_service_available(k) for k in ProviderKind},
        matchers=container.locator.available_matchers(),
        qaStore="postgres" if container.db is not None else "memory",
        database=db_status,
    )


@router.post("/documents/probe", response_model=ProbeResponse)
async def probe_document(document: DocumentIn, container: AppContainer = Depends(get_container)):
    report = await container.probe.run(document.to_locator())
    return ProbeResponse(
        canFetch=report.can_fetch,
        extractionOk=report.extraction_ok,
        pageCount=report.page_count,
        preview=report.preview,
        error=report.error,
        recommendation=report.recommendation,
    )
