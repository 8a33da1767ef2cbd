from __future__ import annotations

import asyncio

from docqa.core.entities import PageText, Relevance
from docqa.models.matcher.keyword_matcher import (
    KeywordOverlapMatcher,
    classify,
    infer_section,
    question_keywords,
    stem,
)


def test_question_keywords_drop_short_words_and_stopwords() -> None:
    assert question_keywords('what is the enrollment age limit') == ['enrollment', 'limit']


def test_stem_keeps_at_least_four_characters() -> None:
    assert stem('enrollment') == 'enroll'
    assert stem('doses') == 'dose'
    assert stem('uses') == 'uses'


def test_enrollment_question_rates_page_as_medium_or_better() -> None:
    page = PageText(4, 'Patients must be between 18 and 65 years old to enroll in the study.')
    result = asyncio.run(KeywordOverlapMatcher().match('what is the enrollment age limit', '', [page]))
    assert len(result.sources) == 1
    assert result.sources[0].relevance in (Relevance.HIGH, Relevance.MEDIUM)
    assert 'enroll' in result.sources[0].exact_text


def test_page_without_keywords_falls_back_to_leading_text() -> None:
    content = 'Schedule of assessments. ' * 30
    result = asyncio.run(KeywordOverlapMatcher().match('adverse event reporting', '', [PageText(2, content)]))
    citation = result.sources[0]
    assert citation.relevance == Relevance.LOW
    assert citation.exact_text == content[:300].strip()
    assert result.confidence == 0.1


def test_placeholder_pages_produce_no_citations() -> None:
    placeholder = PageText(3, 'Unable to extract specific content from page 3.', extracted=False)
    result = asyncio.run(KeywordOverlapMatcher().match('dosing schedule', '', [placeholder]))
    assert result.sources == []
    assert result.confidence == 0.3


def test_confidence_is_capped() -> None:
    pages = [PageText(n, 'dosing schedule for every cohort') for n in range(1, 6)]
    result = asyncio.run(KeywordOverlapMatcher().match('dosing schedule', '', pages))
    assert all(c.relevance == Relevance.HIGH for c in result.sources)
    assert result.confidence == 0.8


def test_infer_section_prefers_heading_line() -> None:
    assert infer_section('5.1 Inclusion Criteria\nPatients must...', 5) == 'Page 5'
    assert infer_section('Inclusion Criteria\nPatients must be adults.', 5) == 'Inclusion Criteria'
    assert infer_section('no heading here.', 2) == 'Page 2'


def test_classify_thresholds() -> None:
    assert classify(3, 4) == Relevance.HIGH
    assert classify(1, 3) == Relevance.MEDIUM
    assert classify(0, 3) == Relevance.LOW
    assert classify(0, 0) == Relevance.LOW
