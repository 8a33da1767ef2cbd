from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List
from docqa.core.entities import QARecord


class IQARepository(ABC):
    @abstractmethod
    def add(self, record: QARecord) -> QARecord: ...
    @abstractmethod
    def list(self, trial_id: str) -> List[QARecord]:
        """Newest first."""
        ...
    @abstractmethod
    def set_verified(self, record_id: str, verified: bool) -> QARecord: ...
    @abstractmethod
    def delete(self, record_id: str) -> None: ...

    def search(self, trial_id: str, term: str) -> List[QARecord]:
        items = self.list(trial_id)
        needle = (term or "").strip().lower()
        if not needle:
            return items
        return [
            r for r in items
            if needle in r.question.lower()
            or needle in r.answer.lower()
            or any(needle in t.lower() for t in r.tags)
        ]

    def verified(self, trial_id: str) -> List[QARecord]:
        return [r for r in self.list(trial_id) if r.is_verified]

    def recent(self, trial_id: str, limit: int = 5) -> List[QARecord]:
        return self.list(trial_id)[:limit]
