from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List
from docqa.core.entities import ExtractionResult, PageText


@dataclass(frozen=True)
class MatchOutcome:
    name: str
    result: ExtractionResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None


class ISourceMatcher(ABC):
    name: str = "matcher"

    @abstractmethod
    def is_available(self) -> bool: ...

    @abstractmethod
    async def match(self, question: str, answer: str, pages: List[PageText]) -> ExtractionResult: ...
