from __future__ import annotations
import json
import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from docqa.core.entities import Citation, ExtractionResult, Relevance
from docqa.core.errors import MalformedOutputError

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


class SourcePayload(BaseModel):
    page: int = Field(..., ge=1)
    section: Optional[str] = None
    exactText: str = ""
    relevance: Literal["high", "medium", "low"] = "low"
    context: str = ""


class ExtractionPayload(BaseModel):
    sources: List[SourcePayload]
    confidence: float = Field(0.0, ge=0.0, le=1.0)


def extract_json_object(raw: str) -> str:
    """Strip code fences, then keep the outermost {...} span."""
    text = _FENCE.sub("", raw or "").strip()
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        return text
    return text[start:end + 1]


def parse_extraction(raw: str, provider: str, strategy: str) -> ExtractionResult:
    if not raw or not raw.strip():
        raise MalformedOutputError(provider, "empty response")
    try:
        payload = ExtractionPayload.model_validate(json.loads(extract_json_object(raw)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise MalformedOutputError(provider, f"unusable JSON: {e}") from e

    sources = [
        Citation(
            page=s.page,
            section=(s.section or "").strip() or f"Page {s.page}",
            exact_text=s.exactText.strip(),
            relevance=Relevance(s.relevance),
            context=s.context.strip(),
        )
        for s in payload.sources
    ]
    return ExtractionResult(sources=sources, confidence=payload.confidence, strategy=strategy)
