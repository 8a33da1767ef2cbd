from __future__ import annotations
from typing import List, Tuple


class DocQAError(Exception):
    """Base class for every error raised by the document Q&A pipeline."""


class ProviderError(DocQAError):
    """An upstream model or API call failed."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class MalformedOutputError(ProviderError):
    """The provider answered, but not in the shape we asked for."""


class DocumentFetchError(DocQAError):
    """The document bytes could not be retrieved for transmission."""

    def __init__(self, url: str | None, message: str):
        super().__init__(f"could not fetch document {url or '<no url>'}: {message}")
        self.url = url


class ServiceUnavailableError(DocQAError):
    """No provider on the fallback ladder has credentials configured."""


class AnswerProviderError(DocQAError):
    """Every provider hop failed."""

    def __init__(self, failures: List[Tuple[str, str]]):
        summary = "; ".join(f"{p}: {e}" for p, e in failures) or "no provider attempted"
        super().__init__(f"all answer providers failed ({summary})")
        self.failures = failures
