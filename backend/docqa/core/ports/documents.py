from __future__ import annotations
from abc import ABC, abstractmethod
from docqa.core.entities import DocumentLocator


class IDocumentFetcher(ABC):
    @abstractmethod
    async def fetch_bytes(self, document: DocumentLocator) -> bytes:
        """Raise DocumentFetchError when the bytes cannot be retrieved."""
        ...

    @abstractmethod
    async def is_reachable(self, url: str) -> tuple[bool, str | None]: ...
