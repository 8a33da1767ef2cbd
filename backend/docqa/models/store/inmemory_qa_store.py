from __future__ import annotations
from dataclasses import replace
from typing import Dict, List

from docqa.core.entities import QARecord
from docqa.core.ports.store import IQARepository


class InMemoryQARepository(IQARepository):
    def __init__(self) -> None:
        self.records: Dict[str, QARecord] = {}

    def add(self, record: QARecord) -> QARecord:
        self.records[record.record_id] = record
        return record

    def list(self, trial_id: str) -> List[QARecord]:
        items = [r for r in self.records.values() if r.trial_id == trial_id]
        return sorted(items, key=lambda r: r.created_at, reverse=True)

    def set_verified(self, record_id: str, verified: bool) -> QARecord:
        updated = replace(self.records[record_id], is_verified=verified)
        self.records[record_id] = updated
        return updated

    def delete(self, record_id: str) -> None:
        if record_id not in self.records:
            raise KeyError(record_id)
        del self.records[record_id]
