from __future__ import annotations

import asyncio

from docqa.core.entities import Citation, DocumentLocator, ExtractionResult, PageText, Relevance
from docqa.core.ports.matcher import ISourceMatcher
from docqa.core.services.citation_service import CitationLocator, SourceExtractionService
from docqa.models.matcher.keyword_matcher import KeywordOverlapMatcher

URL = 'https://files.test/protocol.pdf'
PAGES = [
    PageText(2, 'Inclusion Criteria\nPatients must be between 18 and 65 years old to enroll.'),
    PageText(3, 'Dosing is weekly for twelve weeks.'),
]


class StaticMatcher(ISourceMatcher):
    def __init__(self, name: str, result: ExtractionResult | None = None, error: Exception | None = None,
                 available: bool = True) -> None:
        self.name = name
        self.result = result
        self.error = error
        self.available = available
        self.calls = 0

    def is_available(self) -> bool:
        return self.available

    async def match(self, question: str, answer: str, pages: list[PageText]) -> ExtractionResult:
        self.calls += 1
        if self.error:
            raise self.error
        return self.result


def _cite(page: int, text: str, relevance: Relevance = Relevance.HIGH) -> Citation:
    return Citation(page=page, section=f'Page {page}', exact_text=text, relevance=relevance)


def test_first_successful_matcher_wins_and_later_ones_are_not_called() -> None:
    primary = StaticMatcher('primary', ExtractionResult([_cite(3, 'Dosing is weekly')], 0.9, 'primary'))
    backup = StaticMatcher('backup', ExtractionResult([], 0.1, 'backup'))
    result = asyncio.run(CitationLocator([primary, backup]).locate('q', 'a', PAGES, URL))

    assert result.strategy == 'primary'
    assert result.confidence == 0.9
    assert result.low_confidence is False
    assert backup.calls == 0
    assert result.sources[0].highlight_url.startswith(URL + '#page=3&search=')


def test_failing_and_unavailable_matchers_fall_through_to_keywords() -> None:
    broken = StaticMatcher('broken', error=RuntimeError('boom'))
    offline = StaticMatcher('offline', available=False)
    result = asyncio.run(
        CitationLocator([broken, offline, KeywordOverlapMatcher()]).locate(
            'what is the enrollment age limit', 'a', PAGES, URL
        )
    )
    assert result.strategy == 'keyword'
    assert offline.calls == 0
    assert result.sources[0].page == 2
    assert result.sources[0].relevance in (Relevance.HIGH, Relevance.MEDIUM)


def test_unverified_quotes_cap_confidence_and_flag_result() -> None:
    matcher = StaticMatcher('primary', ExtractionResult(
        [_cite(2, 'Patients must be over 21'), _cite(3, 'Dosing is weekly')], 0.95, 'primary'
    ))
    result = asyncio.run(CitationLocator([matcher]).locate('q', 'a', PAGES))
    assert result.low_confidence is True
    assert result.confidence == 0.5
    assert {c.page: c.verified for c in result.sources} == {2: False, 3: True}


def test_results_are_ranked_and_out_of_range_pages_dropped() -> None:
    matcher = StaticMatcher('primary', ExtractionResult([
        _cite(3, 'Dosing is weekly', Relevance.MEDIUM),
        _cite(9, 'Not in supplied pages'),
        _cite(2, 'Patients must be between 18 and 65'),
    ], 0.8, 'primary'))
    result = asyncio.run(CitationLocator([matcher]).locate('q', 'a', PAGES))
    assert [c.page for c in result.sources] == [2, 3]


def test_empty_sources_always_report_zero_confidence() -> None:
    matcher = StaticMatcher('primary', ExtractionResult([], 0.3, 'primary'))
    result = asyncio.run(CitationLocator([matcher]).locate('q', 'a', PAGES))
    assert result.sources == []
    assert result.confidence == 0.0


def test_every_matcher_failing_returns_empty_result() -> None:
    result = asyncio.run(CitationLocator([StaticMatcher('x', error=ValueError('bad'))]).locate('q', 'a', PAGES))
    assert result.sources == []
    assert result.confidence == 0.0


class RecordingExtractor:
    def __init__(self) -> None:
        self.requested: list[int] = []

    async def extract(self, document: DocumentLocator, pages: list[int]) -> list[PageText]:
        self.requested = list(pages)
        return [PageText(n, f'Text of page {n}. Dosing is weekly.') for n in pages]


def test_source_extraction_expands_cited_page_range() -> None:
    extractor = RecordingExtractor()
    service = SourceExtractionService(extractor, CitationLocator([KeywordOverlapMatcher()]))
    doc = DocumentLocator('doc-1', 'Protocol', URL)

    result = asyncio.run(service.extract_sources('How often is dosing?', 'Weekly [P3] and [P5]', doc))

    assert extractor.requested == [2, 3, 4, 5, 6]
    assert result.strategy == 'keyword'
    assert {c.page for c in result.sources} == {2, 3, 4, 5, 6}


def test_source_extraction_without_page_refs_does_nothing() -> None:
    extractor = RecordingExtractor()
    service = SourceExtractionService(extractor, CitationLocator([KeywordOverlapMatcher()]))
    result = asyncio.run(service.extract_sources('q', 'no markers here', DocumentLocator('d', 'D', URL)))
    assert result.sources == []
    assert extractor.requested == []


def test_quotes_differing_only_in_case_are_low_confidence() -> None:
    matcher = StaticMatcher('primary', ExtractionResult([_cite(3, 'DOSING IS WEEKLY')], 0.9, 'primary'))
    result = asyncio.run(CitationLocator([matcher]).locate('q', 'a', PAGES))
    assert result.sources[0].verified is False
    assert result.low_confidence is True
    assert result.confidence == 0.5
