# backend/docqa/db/config.py
from __future__ import annotations
import logging
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env before reading settings
load_dotenv()

logger = logging.getLogger("docqa.config")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    # backend | third-party-pdf-qa | direct-llm | mock
    ai_service: str = Field("direct-llm")

    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-3-5-haiku-20241022"
    openai_api_key: str | None = None
    openai_matcher_model: str = "gpt-4o-mini"
    groq_api_key: str | None = None
    groq_matcher_model: str = "llama-3.1-8b-instant"
    groq_base_url: str = "https://api.groq.com/openai/v1"
    chatpdf_api_key: str | None = None
    backend_api_base_url: str | None = None

    http_timeout: float = Field(60.0, gt=0)
    matcher_max_tokens: int = Field(2000, ge=1)
    matcher_json_retries: int = Field(1, ge=0)
    groq_page_char_limit: int = Field(800, ge=1)

    qa_store: str = Field("memory")  # memory | postgres
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "trialdocs"

    log_level: str = "INFO"

    @property
    def database_url(self) -> str:
        return (
            f"postgresql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def masked_database_url(self) -> str:
        return self.database_url.replace(self.db_password, "*****") if self.db_password else self.database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
