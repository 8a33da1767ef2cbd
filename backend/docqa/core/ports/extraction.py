from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional
from docqa.core.entities import PageText


@dataclass(frozen=True)
class StrategyOutcome:
    name: str
    pages: List[PageText] = field(default_factory=list)
    page_count: Optional[int] = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.pages)


class IPageExtractionStrategy(ABC):
    name: str = "strategy"

    @abstractmethod
    def extract(self, data: bytes, pages: List[int]) -> StrategyOutcome:
        """Return text for the requested 1-based pages that exist in the document."""
        ...
