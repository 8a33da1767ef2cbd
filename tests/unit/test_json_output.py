from __future__ import annotations

import pytest

from docqa.core.entities import Relevance
from docqa.core.errors import MalformedOutputError
from docqa.models.matcher.json_output import extract_json_object, parse_extraction


def test_extract_json_object_strips_fences_and_chatter() -> None:
    raw = 'Here you go:\n```json\n{"sources": [], "confidence": 0.4}\n```\nThanks'
    assert extract_json_object(raw) == '{"sources": [], "confidence": 0.4}'


def test_parse_extraction_maps_payload_to_citations() -> None:
    raw = (
        '{"sources": [{"page": 3, "section": "", "exactText": " Adults only. ",'
        ' "relevance": "medium", "context": "ctx"}], "confidence": 0.7}'
    )
    result = parse_extraction(raw, 'openai', 'openai')
    assert result.strategy == 'openai'
    assert result.confidence == 0.7
    citation = result.sources[0]
    assert (citation.page, citation.section, citation.exact_text) == (3, 'Page 3', 'Adults only.')
    assert citation.relevance == Relevance.MEDIUM


@pytest.mark.parametrize('raw', [
    '',
    'not json at all',
    '{"sources": [{"page": 0, "exactText": "x"}], "confidence": 0.5}',
    '{"sources": [{"page": 1, "relevance": "critical"}], "confidence": 0.5}',
    '{"confidence": 0.5}',
])
def test_parse_extraction_rejects_malformed_output(raw: str) -> None:
    with pytest.raises(MalformedOutputError):
        parse_extraction(raw, 'groq', 'groq')
