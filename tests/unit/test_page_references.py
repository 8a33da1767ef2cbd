from __future__ import annotations

from docqa.core.services.page_references import (
    expand_page_range,
    parse_loose_quotes,
    parse_page_quotes,
    parse_references,
)


def test_parse_references_keeps_order_and_duplicates() -> None:
    assert parse_references('See [P3] and [P7] for details [P3]') == [3, 7, 3]


def test_parse_references_reads_page_tagged_quotes() -> None:
    text = "Age limits [Page 4: 'between 18 and 65'] and dosing [P9]"
    assert parse_references(text) == [4, 9]


def test_parse_references_ignores_page_zero_and_plain_text() -> None:
    assert parse_references('[P0] page 5 [Page 0: "nothing"]') == []
    assert parse_references('') == []


def test_parse_page_quotes_accepts_both_quote_styles() -> None:
    text = "[Page 2: 'single quoted'] then [Page 11: \"double quoted\"]"
    assert parse_page_quotes(text) == [(2, 'single quoted'), (11, 'double quoted')]


def test_parse_loose_quotes_requires_twenty_chars_and_respects_limit() -> None:
    text = "'short' 'this quote is long enough' 'another quote long enough' 'a third long quote here' 'fourth long quote too'"
    quotes = parse_loose_quotes(text)
    assert quotes == ['this quote is long enough', 'another quote long enough', 'a third long quote here']


def test_expand_page_range_adds_neighbours_without_going_below_one() -> None:
    assert expand_page_range([3, 7, 3]) == [2, 3, 4, 5, 6, 7, 8]
    assert expand_page_range([1]) == [1, 2]
    assert expand_page_range([]) == []
