from __future__ import annotations
import logging
from typing import Dict, List

from docqa.core.entities import ProviderKind, QueryParams, UnifiedAnswerResponse
from docqa.core.errors import AnswerProviderError, DocumentFetchError, ServiceUnavailableError
from docqa.core.ports.provider import IAnswerProvider, ProviderOutcome

logger = logging.getLogger("docqa.router")

DEFAULT_PROVIDER = ProviderKind.DIRECT_LLM
SECONDARY_FALLBACK = ProviderKind.DIRECT_LLM
FINAL_FALLBACK = ProviderKind.BACKEND

_ALIASES = {
    "chatpdf": ProviderKind.PDF_QA,
    "anthropic": ProviderKind.DIRECT_LLM,
    "anthropic-mockup": ProviderKind.MOCK,
}


def resolve_provider_kind(value: str | None) -> ProviderKind:
    raw = (value or "").strip().lower()
    if raw in _ALIASES:
        return _ALIASES[raw]
    try:
        return ProviderKind(raw)
    except ValueError:
        logger.warning(f"⚠️ Invalid AI service {value!r}; defaulting to {DEFAULT_PROVIDER.value}")
        return DEFAULT_PROVIDER


def fallback_plan(selected: ProviderKind) -> List[ProviderKind]:
    """Configured provider, then the secondary and final fallbacks, each at most once."""
    plan = [selected]
    for hop in (SECONDARY_FALLBACK, FINAL_FALLBACK):
        if hop not in plan:
            plan.append(hop)
    return plan


class AnswerServiceRouter:
    """
    Routes a question to the configured provider and walks the fallback plan
    on failure. Every provider adapter returns the same UnifiedAnswerResponse.
    """

    def __init__(self, providers: Dict[ProviderKind, IAnswerProvider], selected: ProviderKind):
        self.providers = providers
        self.selected = selected

    def current_service(self) -> ProviderKind:
        return self.selected

    def is_service_available(self, kind: ProviderKind) -> bool:
        provider = self.providers.get(kind)
        return provider is not None and provider.is_available()

    async def _call(self, kind: ProviderKind, params: QueryParams) -> ProviderOutcome:
        provider = self.providers.get(kind)
        if provider is None or not provider.is_available():
            return ProviderOutcome(kind=kind, skipped=True)
        try:
            return ProviderOutcome(kind=kind, response=await provider.query(params))
        except Exception as e:
            return ProviderOutcome(kind=kind, error=e)

    async def query(self, params: QueryParams) -> UnifiedAnswerResponse:
        outcomes: List[ProviderOutcome] = []
        for kind in fallback_plan(self.selected):
            if outcomes:
                logger.info(f"🔄 Falling back to {kind.value}...")
            else:
                logger.info(f"🔄 Using AI service: {kind.value}")
            outcome = await self._call(kind, params)
            outcomes.append(outcome)
            if outcome.ok:
                return outcome.response
            if outcome.skipped:
                logger.warning(f"⚠️ AI service {kind.value} not configured; skipped")
            else:
                logger.error(f"❌ AI service {kind.value} failed: {outcome.error}")

        attempted = [o for o in outcomes if not o.skipped]
        if not attempted:
            raise ServiceUnavailableError(
                "no AI service is configured: tried " + ", ".join(o.kind.value for o in outcomes)
            )
        if all(isinstance(o.error, DocumentFetchError) for o in attempted):
            raise attempted[-1].error
        raise AnswerProviderError([(o.kind.value, str(o.error)) for o in attempted])
