from __future__ import annotations

import httpx
from fastapi.testclient import TestClient

from docqa.container import build_container
from docqa.db.config import Settings
from docqa.main import app

DOCUMENT = {'id': 'doc-1', 'name': 'Protocol', 'url': 'https://files.test/protocol.pdf'}


def _settings(**overrides) -> Settings:
    values = dict(
        ai_service='mock',
        anthropic_api_key=None,
        openai_api_key=None,
        groq_api_key=None,
        chatpdf_api_key=None,
        backend_api_base_url=None,
        qa_store='memory',
    )
    values.update(overrides)
    return Settings(**values)


def _client(settings: Settings) -> TestClient:
    def files(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text='not found')

    http = httpx.AsyncClient(transport=httpx.MockTransport(files))
    app.state.container = build_container(settings, http_client=http)
    return TestClient(app)


def test_health_and_status() -> None:
    client = _client(_settings())
    assert client.get('/health').json() == {'status': 'ok'}

    status = client.get('/status').json()
    assert status['service'] == 'mock'
    assert status['services']['mock'] is True
    assert status['services']['direct-llm'] is False
    assert status['matchers'] == ['keyword']
    assert status['qaStore'] == 'memory'


def test_answer_keeps_provider_sources_when_document_is_unreadable() -> None:
    client = _client(_settings())
    response = client.post('/answer', json={'question': 'What are the objectives?', 'document': DOCUMENT})

    assert response.status_code == 200
    body = response.json()
    assert body['providerUsed'] == 'mock'
    assert body['citationStrategy'] == 'provider'
    assert body['lowConfidence'] is True
    assert [s['page'] for s in body['sources']] == [1, 2]
    assert body['usage'] == {'inputTokens': 3210, 'outputTokens': 312}
    assert body['savedId'] is None


def test_answer_without_configured_provider_is_503() -> None:
    client = _client(_settings(ai_service='direct-llm'))
    response = client.post('/answer', json={'question': 'What are the objectives?', 'document': DOCUMENT})
    assert response.status_code == 503


def test_answer_rejects_invalid_payload() -> None:
    client = _client(_settings())
    assert client.post('/answer', json={'question': 'hi', 'document': DOCUMENT}).status_code == 422
    response = client.post('/answer', json={'question': 'What is it?', 'document': DOCUMENT, 'save': True})
    assert response.status_code == 400


def test_saved_answers_round_trip_through_repository_routes() -> None:
    client = _client(_settings())
    saved = client.post('/answer', json={
        'question': 'What are the objectives?', 'document': DOCUMENT,
        'save': True, 'trial_id': 'trial-1', 'tags': ['objectives'],
    }).json()
    record_id = saved['savedId']
    assert record_id

    manual = client.post('/qa', json={
        'trial_id': 'trial-1', 'question': 'Dosing?', 'answer': 'Weekly', 'source': 'manual',
        'sources': [{'page': 3, 'section': 'Dosing', 'exactText': 'Weekly', 'relevance': 'high'}],
    })
    assert manual.status_code == 201

    listed = client.get('/qa', params={'trial_id': 'trial-1'}).json()
    assert {item['id'] for item in listed} == {record_id, manual.json()['id']}
    assert [item['id'] for item in client.get('/qa', params={'trial_id': 'trial-1', 'search': 'objectives'}).json()] == [record_id]

    verified = client.patch(f'/qa/{record_id}/verify', json={'is_verified': True}).json()
    assert verified['is_verified'] is True
    assert [i['id'] for i in client.get('/qa', params={'trial_id': 'trial-1', 'verified': True}).json()] == [record_id]

    assert client.delete(f'/qa/{record_id}').status_code == 204
    assert client.delete(f'/qa/{record_id}').status_code == 404
    assert client.patch('/qa/missing/verify', json={'is_verified': True}).status_code == 404


def test_extract_sources_and_probe_with_unreachable_document() -> None:
    client = _client(_settings())
    extracted = client.post('/sources/extract', json={
        'question': 'Who can enroll?', 'answer': 'Adults [P2]', 'document': DOCUMENT,
    }).json()
    assert extracted['sources'] == []
    assert extracted['confidence'] == 0.0

    probe = client.post('/documents/probe', json=DOCUMENT).json()
    assert probe['canFetch'] is False
    assert probe['extractionOk'] is False
    assert '404' in probe['error']

    assert client.post('/cache/clear').json() == {'ok': True}
