from __future__ import annotations
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from docqa.core.entities import (
    AnsweredQuestion, Citation, DocumentLocator, ExtractionResult, QARecord, Relevance,
)


class DocumentIn(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = "Document"
    url: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None

    def to_locator(self) -> DocumentLocator:
        return DocumentLocator(doc_id=self.id, name=self.name, url=self.url,
                               file_size=self.file_size, mime_type=self.mime_type)


class SourceOut(BaseModel):
    page: int = Field(..., ge=1)
    section: str
    exactText: str = ""
    relevance: Literal["high", "medium", "low"]
    context: str = ""
    highlightURL: Optional[str] = None
    verified: bool = True

    @classmethod
    def from_citation(cls, c: Citation) -> "SourceOut":
        return cls(page=c.page, section=c.section, exactText=c.exact_text, relevance=c.relevance.value,
                   context=c.context, highlightURL=c.highlight_url, verified=c.verified)

    def to_citation(self) -> Citation:
        return Citation(page=self.page, section=self.section, exact_text=self.exactText,
                        relevance=Relevance(self.relevance), context=self.context,
                        highlight_url=self.highlightURL, verified=self.verified)


class UsageOut(BaseModel):
    inputTokens: int
    outputTokens: int


class AnswerRequest(BaseModel):
    question: str = Field(..., min_length=3, description="User question")
    document: DocumentIn
    user_id: str = "anonymous"
    limit: int = Field(default=5, ge=1, le=50)
    trial_id: Optional[str] = None
    save: bool = False
    tags: List[str] = Field(default_factory=list)


class ExtractionOut(BaseModel):
    sources: List[SourceOut]
    confidence: float
    strategy: str
    lowConfidence: bool = False

    @classmethod
    def from_result(cls, r: ExtractionResult) -> "ExtractionOut":
        return cls(sources=[SourceOut.from_citation(c) for c in r.sources], confidence=r.confidence,
                   strategy=r.strategy, lowConfidence=r.low_confidence)


class AnswerResponse(BaseModel):
    content: str
    sources: List[SourceOut]
    confidence: float
    providerUsed: str
    citationStrategy: str
    lowConfidence: bool = False
    usage: Optional[UsageOut] = None
    savedId: Optional[str] = None

    @classmethod
    def from_answer(cls, a: AnsweredQuestion, saved_id: str | None = None) -> "AnswerResponse":
        usage = a.answer.usage
        return cls(
            content=a.answer.content,
            sources=[SourceOut.from_citation(c) for c in a.extraction.sources],
            confidence=a.extraction.confidence,
            providerUsed=a.answer.provider_used.value,
            citationStrategy=a.extraction.strategy,
            lowConfidence=a.extraction.low_confidence,
            usage=UsageOut(inputTokens=usage.input_tokens, outputTokens=usage.output_tokens) if usage else None,
            savedId=saved_id,
        )


class ExtractSourcesRequest(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str
    document: DocumentIn
    pages: Optional[List[int]] = None


class ProbeResponse(BaseModel):
    canFetch: bool
    extractionOk: bool
    pageCount: Optional[int] = None
    preview: Optional[str] = None
    error: Optional[str] = None
    recommendation: str = ""


class QAItemCreate(BaseModel):
    trial_id: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    answer: str
    tags: List[str] = Field(default_factory=list)
    source: str = "ai"
    sources: List[SourceOut] = Field(default_factory=list)
    created_by: Optional[str] = None


class QAItemOut(BaseModel):
    id: str
    trial_id: str
    question: str
    answer: str
    created_at: str
    tags: List[str]
    source: str
    sources: List[SourceOut]
    is_verified: bool
    created_by: Optional[str] = None

    @classmethod
    def from_record(cls, r: QARecord) -> "QAItemOut":
        return cls(id=r.record_id, trial_id=r.trial_id, question=r.question, answer=r.answer,
                   created_at=r.created_at, tags=r.tags, source=r.source,
                   sources=[SourceOut.from_citation(c) for c in r.sources],
                   is_verified=r.is_verified, created_by=r.created_by)


class VerifyRequest(BaseModel):
    is_verified: bool


class StatusResponse(BaseModel):
    service: str
    services: dict
    matchers: List[str]
    qaStore: str
    database: Optional[dict] = None
