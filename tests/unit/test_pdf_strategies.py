from __future__ import annotations

import io

from pypdf import PdfWriter

from docqa.models.pdf.layout_strategy import PypdfLayoutStrategy, order_fragments
from docqa.models.pdf.whole_document_strategy import PypdfWholeDocumentStrategy, split_into_pages


def _blank_pdf(pages: int) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def test_order_fragments_reads_top_down_then_left_right() -> None:
    fragments = [
        (300.0, 700.0, 'Criteria'),
        (72.0, 700.5, 'Inclusion'),
        (72.0, 650.0, 'Adults   aged'),
        (200.0, 651.0, '18-65.'),
        (72.0, 720.0, ''),
    ]
    assert order_fragments(fragments) == 'Inclusion Criteria Adults aged 18-65.'


def test_order_fragments_separates_lines_beyond_tolerance() -> None:
    fragments = [(10.0, 100.0, 'second'), (200.0, 110.0, 'first')]
    assert order_fragments(fragments, line_tolerance=5.0) == 'first second'
    assert order_fragments(fragments, line_tolerance=20.0) == 'second first'


def test_split_into_pages_snaps_to_sentence_end() -> None:
    text = 'Alpha beta gamma. Delta epsilon zeta. Eta theta iota.'
    chunks = split_into_pages(text, 3)
    assert len(chunks) == 3
    assert chunks[0] == 'Alpha beta gamma.'
    assert ''.join(chunks).replace(' ', '') == text.replace(' ', '')


def test_split_into_pages_handles_degenerate_counts() -> None:
    assert split_into_pages('anything', 0) == []
    assert split_into_pages('one page only', 1) == ['one page only']


def test_layout_strategy_reports_page_count_for_blank_document() -> None:
    outcome = PypdfLayoutStrategy().extract(_blank_pdf(2), [1, 2, 5])
    assert not outcome.ok
    assert outcome.page_count == 2
    assert outcome.error


def test_whole_document_strategy_fails_without_text() -> None:
    outcome = PypdfWholeDocumentStrategy().extract(_blank_pdf(1), [1])
    assert not outcome.ok
    assert outcome.page_count == 1
