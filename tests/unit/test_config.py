from __future__ import annotations

from docqa.core.entities import ProviderKind
from docqa.core.services.answer_router import resolve_provider_kind
from docqa.db.config import Settings


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv('AI_SERVICE', 'chatpdf')
    monkeypatch.setenv('GROQ_PAGE_CHAR_LIMIT', '400')
    monkeypatch.setenv('HTTP_TIMEOUT', '15')

    settings = Settings()

    assert resolve_provider_kind(settings.ai_service) == ProviderKind.PDF_QA
    assert settings.groq_page_char_limit == 400
    assert settings.http_timeout == 15.0


def test_database_url_is_masked() -> None:
    settings = Settings(db_user='qa', db_password='s3cret', db_host='db', db_port=5433, db_name='trials')
    assert settings.database_url == 'postgresql://qa:s3cret@db:5433/trials'
    assert 's3cret' not in settings.masked_database_url
