# backend/docqa/router/qa_repository.py
from __future__ import annotations
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from docqa.core.entities import QARecord
from docqa.core.ports.store import IQARepository
from docqa.db.deps import get_repository
from docqa.models.schemas import QAItemCreate, QAItemOut, VerifyRequest

logger = logging.getLogger("docqa.api.qa")

router = APIRouter(prefix="/qa", tags=["qa-repository"])


@router.post("", response_model=QAItemOut, status_code=status.HTTP_201_CREATED)
def add_item(payload: QAItemCreate, repo: IQARepository = Depends(get_repository)):
    record = QARecord(
        record_id=str(uuid.uuid4()),
        trial_id=payload.trial_id,
        question=payload.question,
        answer=payload.answer,
        created_at=datetime.now(timezone.utc).isoformat(),
        tags=payload.tags,
        source=payload.source,
        sources=[s.to_citation() for s in payload.sources],
        created_by=payload.created_by,
    )
    saved = repo.add(record)
    logger.info(f"💾 Added Q&A {saved.record_id} to trial {saved.trial_id}")
    return QAItemOut.from_record(saved)


@router.get("", response_model=List[QAItemOut])
def list_items(
    trial_id: str,
    search: Optional[str] = None,
    verified: bool = False,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    repo: IQARepository = Depends(get_repository),
):
    if search:
        records = repo.search(trial_id, search)
    elif verified:
        records = repo.verified(trial_id)
    elif limit:
        records = repo.recent(trial_id, limit)
    else:
        records = repo.list(trial_id)
    return [QAItemOut.from_record(r) for r in records]


@router.patch("/{record_id}/verify", response_model=QAItemOut)
def verify_item(record_id: str, payload: VerifyRequest, repo: IQARepository = Depends(get_repository)):
    try:
        record = repo.set_verified(record_id, payload.is_verified)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Q&A record {record_id} not found")
    return QAItemOut.from_record(record)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(record_id: str, repo: IQARepository = Depends(get_repository)):
    try:
        repo.delete(record_id)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Q&A record {record_id} not found")
