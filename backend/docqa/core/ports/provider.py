from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from docqa.core.entities import ProviderKind, QueryParams, UnifiedAnswerResponse


@dataclass(frozen=True)
class ProviderOutcome:
    kind: ProviderKind
    response: UnifiedAnswerResponse | None = None
    error: Exception | None = None
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.response is not None


class IAnswerProvider(ABC):
    kind: ProviderKind

    @abstractmethod
    def is_available(self) -> bool: ...

    @abstractmethod
    async def query(self, params: QueryParams) -> UnifiedAnswerResponse: ...
