# backend/docqa/router/answer.py
from __future__ import annotations
import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from docqa.container import AppContainer
from docqa.core.entities import QueryParams
from docqa.core.errors import AnswerProviderError, DocumentFetchError, ServiceUnavailableError
from docqa.db.deps import get_container
from docqa.models.schemas import AnswerRequest, AnswerResponse, ExtractionOut, ExtractSourcesRequest

logger = logging.getLogger("docqa.api.answer")

router = APIRouter(prefix="", tags=["qa"])


@router.post("/answer", response_model=AnswerResponse)
async def answer(payload: AnswerRequest, container: AppContainer = Depends(get_container)):
    if not payload.question.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Question must not be empty.")
    if payload.save and not payload.trial_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="trial_id is required to save.")

    params = QueryParams(
        question=payload.question,
        document=payload.document.to_locator(),
        user_id=payload.user_id,
        result_limit=payload.limit,
    )
    try:
        result = await container.qa_service.ask(params)
    except ServiceUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except DocumentFetchError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Could not fetch document: {e}")
    except AnswerProviderError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"All AI services failed: {e}")

    saved_id = None
    if payload.save:
        record = await asyncio.to_thread(
            container.qa_service.save,
            payload.trial_id, payload.question, result, tags=payload.tags, created_by=payload.user_id,
        )
        saved_id = record.record_id
        logger.info(f"💾 Saved answer {saved_id} to trial {payload.trial_id}")
    return AnswerResponse.from_answer(result, saved_id)


@router.post("/sources/extract", response_model=ExtractionOut)
async def extract_sources(payload: ExtractSourcesRequest, container: AppContainer = Depends(get_container)):
    result = await container.sources.extract_sources(
        payload.question, payload.answer, payload.document.to_locator(), payload.pages
    )
    return ExtractionOut.from_result(result)


@router.post("/cache/clear")
def clear_cache(container: AppContainer = Depends(get_container)):
    container.clear_caches()
    return {"ok": True}
