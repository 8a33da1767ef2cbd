from __future__ import annotations

import asyncio

import httpx
import pytest

from docqa.core.entities import DocumentLocator
from docqa.core.errors import DocumentFetchError
from docqa.models.fetch.http_document_fetcher import HttpDocumentFetcher

DOC = DocumentLocator('doc-1', 'Protocol', 'https://files.test/protocol.pdf')


def _fetcher(handler) -> HttpDocumentFetcher:
    return HttpDocumentFetcher(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_fetch_returns_body_bytes() -> None:
    fetcher = _fetcher(lambda r: httpx.Response(200, content=b'%PDF-1.7 data'))
    assert asyncio.run(fetcher.fetch_bytes(DOC)) == b'%PDF-1.7 data'


@pytest.mark.parametrize('response', [
    httpx.Response(403, text='forbidden'),
    httpx.Response(200, content=b''),
])
def test_fetch_failures_raise_document_fetch_error(response: httpx.Response) -> None:
    fetcher = _fetcher(lambda r: response)
    with pytest.raises(DocumentFetchError) as info:
        asyncio.run(fetcher.fetch_bytes(DOC))
    assert info.value.url == DOC.url


def test_fetch_transport_errors_raise_document_fetch_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError('refused', request=request)

    with pytest.raises(DocumentFetchError):
        asyncio.run(_fetcher(handler).fetch_bytes(DOC))


def test_fetch_without_url_raises() -> None:
    fetcher = _fetcher(lambda r: httpx.Response(200, content=b'x'))
    with pytest.raises(DocumentFetchError):
        asyncio.run(fetcher.fetch_bytes(DocumentLocator('doc-2', 'No URL')))


def test_is_reachable_uses_head() -> None:
    methods: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        return httpx.Response(200 if request.url.path == '/ok.pdf' else 404)

    fetcher = _fetcher(handler)
    assert asyncio.run(fetcher.is_reachable('https://files.test/ok.pdf')) == (True, None)
    ok, error = asyncio.run(fetcher.is_reachable('https://files.test/missing.pdf'))
    assert ok is False
    assert '404' in error
    assert methods == ['HEAD', 'HEAD']
