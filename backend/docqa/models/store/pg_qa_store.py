# backend/docqa/models/store/pg_qa_store.py
from __future__ import annotations
import logging
from typing import Any, Dict, List

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docqa.core.entities import Citation, QARecord, Relevance
from docqa.core.ports.store import IQARepository
from docqa.db.session import DatabasePool

logger = logging.getLogger("docqa.store.pg")

_COLUMNS = "id, trial_id, question, answer, created_by, created_at, tags, is_verified, source, sources"


def citation_to_dict(c: Citation) -> Dict[str, Any]:
    return {
        "page": c.page,
        "section": c.section,
        "exactText": c.exact_text,
        "relevance": c.relevance.value,
        "context": c.context,
        "highlightURL": c.highlight_url,
        "verified": c.verified,
    }


def citation_from_dict(d: Dict[str, Any]) -> Citation | None:
    page = d.get("page")
    if not isinstance(page, int) or page < 1:
        return None
    rel = d.get("relevance") if d.get("relevance") in ("high", "medium", "low") else "low"
    return Citation(
        page=page,
        section=d.get("section") or f"Page {page}",
        exact_text=d.get("exactText") or d.get("content") or "",
        relevance=Relevance(rel),
        context=d.get("context") or "",
        highlight_url=d.get("highlightURL"),
        verified=bool(d.get("verified", True)),
    )


def _row_to_record(row: Dict[str, Any]) -> QARecord:
    created = row.get("created_at")
    return QARecord(
        record_id=str(row["id"]),
        trial_id=str(row["trial_id"]),
        question=row["question"],
        answer=row["answer"],
        created_at=created.isoformat() if hasattr(created, "isoformat") else str(created),
        tags=list(row.get("tags") or []),
        source=row.get("source") or "ai",
        sources=[c for c in (citation_from_dict(s) for s in row.get("sources") or []) if c],
        is_verified=bool(row.get("is_verified")),
        created_by=str(row["created_by"]) if row.get("created_by") else None,
    )


class PgQARepository(IQARepository):
    """Stores Q&A records in an existing `qa_repository` table."""

    def __init__(self, db: DatabasePool, table: str = "qa_repository"):
        self.db = db
        self.table = table

    def _pool(self):
        return self.db.pool or self.db.init()

    def add(self, record: QARecord) -> QARecord:
        with self._pool().connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                INSERT INTO {self.table}
                    (id, trial_id, question, answer, created_by, created_at, updated_at,
                     tags, is_verified, source, sources)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING {_COLUMNS};
                """,
                (
                    record.record_id, record.trial_id, record.question, record.answer,
                    record.created_by, record.created_at, record.created_at,
                    record.tags, record.is_verified, record.source,
                    Jsonb([citation_to_dict(c) for c in record.sources]),
                ),
            )
            row = cur.fetchone()
        logger.info(f"💾 Saved Q&A record {record.record_id} for trial {record.trial_id}")
        return _row_to_record(row)

    def list(self, trial_id: str) -> List[QARecord]:
        with self._pool().connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"SELECT {_COLUMNS} FROM {self.table} WHERE trial_id = %s ORDER BY created_at DESC;",
                (trial_id,),
            )
            return [_row_to_record(r) for r in cur.fetchall()]

    def set_verified(self, record_id: str, verified: bool) -> QARecord:
        with self._pool().connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"UPDATE {self.table} SET is_verified = %s, updated_at = now() "
                f"WHERE id = %s RETURNING {_COLUMNS};",
                (verified, record_id),
            )
            row = cur.fetchone()
        if row is None:
            raise KeyError(record_id)
        return _row_to_record(row)

    def delete(self, record_id: str) -> None:
        with self._pool().connection() as conn, conn.cursor() as cur:
            cur.execute(f"DELETE FROM {self.table} WHERE id = %s;", (record_id,))
            if cur.rowcount == 0:
                raise KeyError(record_id)
