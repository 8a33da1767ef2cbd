from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional


class ProviderKind(str, Enum):
    BACKEND = "backend"
    PDF_QA = "third-party-pdf-qa"
    DIRECT_LLM = "direct-llm"
    MOCK = "mock"


class Relevance(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 0, "medium": 1, "low": 2}[self.value]


@dataclass(frozen=True)
class DocumentLocator:
    doc_id: str
    name: str
    url: str | None = None
    file_size: int | None = None
    mime_type: str | None = None


@dataclass(frozen=True)
class PageText:
    page_number: int
    content: str
    extracted: bool = True  # False => placeholder, carries no evidence


@dataclass(frozen=True)
class Citation:
    page: int
    section: str
    exact_text: str
    relevance: Relevance
    context: str = ""
    highlight_url: str | None = None
    verified: bool = True

    def with_link(self, url: str | None) -> "Citation":
        return replace(self, highlight_url=url)


@dataclass(frozen=True)
class ExtractionResult:
    sources: List[Citation]
    confidence: float
    strategy: str = "none"
    low_confidence: bool = False

    @classmethod
    def empty(cls, strategy: str = "none") -> "ExtractionResult":
        return cls(sources=[], confidence=0.0, strategy=strategy)


@dataclass(frozen=True)
class Usage:
    input_tokens: int
    output_tokens: int


@dataclass(frozen=True)
class UnifiedAnswerResponse:
    content: str
    sources: List[Citation]
    provider_used: ProviderKind
    usage: Optional[Usage] = None
    model: str | None = None


@dataclass(frozen=True)
class QueryParams:
    question: str
    document: DocumentLocator
    user_id: str
    result_limit: int = 5


@dataclass(frozen=True)
class QARecord:
    record_id: str
    trial_id: str
    question: str
    answer: str
    created_at: str
    tags: List[str] = field(default_factory=list)
    source: str = "ai"
    sources: List[Citation] = field(default_factory=list)
    is_verified: bool = False
    created_by: str | None = None


@dataclass(frozen=True)
class AnsweredQuestion:
    """Answer text plus the citations the pipeline could back it with."""
    answer: UnifiedAnswerResponse
    extraction: ExtractionResult
