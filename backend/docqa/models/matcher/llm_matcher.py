from __future__ import annotations
import logging
from typing import List

from openai import AsyncOpenAI, OpenAIError

from docqa.core.entities import ExtractionResult, PageText
from docqa.core.errors import MalformedOutputError, ProviderError
from docqa.core.ports.matcher import ISourceMatcher
from docqa.models.matcher.json_output import parse_extraction

logger = logging.getLogger("docqa.matcher")

SYSTEM_PROMPT = (
    "You are a precise document analyst. Always respond with valid JSON only. "
    "Never include explanations or markdown formatting."
)

FULL_PROMPT = """You are a precise medical document analyst for a clinical trial management system. Your analysis will be used for regulatory compliance and patient safety decisions.

USER QUERY: "{question}"

AI RESPONSE: "{answer}"

ACTUAL PDF PAGE CONTENT:
{pages}

TASK: Find ALL passages across these PDF pages that support the response to the user's query.

REQUIREMENTS:
1. Text must be LITERAL word-for-word quotes from the page content above
2. Verify each quote actually appears in the provided content before including it
3. Include passages that start on one page and continue on the next
4. Infer section names from the document structure (headings, numbering), otherwise use "Page N"
5. Use only these page numbers: {page_numbers}
6. Prefer complete sentences with actual information; skip table-of-contents and navigation text
7. Mark relevance as "high", "medium" or "low"

Respond with valid JSON only:
{{
  "sources": [
    {{
      "page": {first_page},
      "section": "Inferred section name or Page N",
      "exactText": "literal text from the page",
      "relevance": "high",
      "context": "surrounding text from the same page"
    }}
  ],
  "confidence": 0.95
}}"""

SHORT_PROMPT = """Extract exact citations from PDF content. Respond ONLY with valid JSON.

QUERY: "{question}"
AI RESPONSE: "{answer}"

PDF PAGE CONTENT:
{pages}

Find the most relevant exact text from the PDF that answers the query.

Return ONLY this JSON format:
{{"sources": [{{"page": {first_page}, "section": "Section Name", "exactText": "exact literal text from PDF", "relevance": "high", "context": "surrounding context"}}], "confidence": 0.9}}

CRITICAL: Response must be valid JSON only. No explanations, no markdown, no other text."""


class ChatCompletionMatcher(ISourceMatcher):
    """
    Asks a chat-completions model for literal quotes from the supplied pages.
    Malformed JSON is retried `json_retries` times before the matcher gives up.
    """

    name = "chat-completion"

    def __init__(
        self,
        client: AsyncOpenAI | None,
        model: str,
        max_tokens: int = 2000,
        json_retries: int = 1,
    ):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.json_retries = json_retries

    def is_available(self) -> bool:
        return self.client is not None

    def _prompt(self, question: str, answer: str, pages: List[PageText]) -> str:
        raise NotImplementedError

    def _request(self, prompt: str) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.1,
            "max_tokens": self.max_tokens,
        }

    async def match(self, question: str, answer: str, pages: List[PageText]) -> ExtractionResult:
        if self.client is None:
            raise ProviderError(self.name, "no API key configured")
        evidence = [p for p in pages if p.extracted]
        if not evidence:
            raise ProviderError(self.name, "no extracted page text to match against")

        request = self._request(self._prompt(question, answer, evidence))
        last_error: MalformedOutputError | None = None
        for attempt in range(self.json_retries + 1):
            try:
                completion = await self.client.chat.completions.create(**request)
            except OpenAIError as e:
                raise ProviderError(self.name, f"{type(e).__name__}: {e}") from e
            raw = completion.choices[0].message.content if completion.choices else ""
            logger.debug(f"🔍 {self.name} raw response: {(raw or '')[:200]}")
            try:
                result = parse_extraction(raw, self.name, self.name)
            except MalformedOutputError as e:
                last_error = e
                logger.warning(f"⚠️ {self.name} returned malformed JSON (attempt {attempt + 1}): {e}")
                continue
            logger.info(f"✅ {self.name} source extraction found {len(result.sources)} sources")
            return result
        raise last_error


class OpenAIMatcher(ChatCompletionMatcher):
    name = "openai"

    def _prompt(self, question: str, answer: str, pages: List[PageText]) -> str:
        return FULL_PROMPT.format(
            question=question,
            answer=answer,
            pages="\n\n".join(f"=== PAGE {p.page_number} ===\n{p.content}" for p in pages),
            page_numbers=", ".join(str(p.page_number) for p in pages),
            first_page=pages[0].page_number,
        )

    def _request(self, prompt: str) -> dict:
        req = super()._request(prompt)
        req["messages"] = [{"role": "system", "content": SYSTEM_PROMPT}] + req["messages"]
        req["response_format"] = {"type": "json_object"}
        return req


class GroqMatcher(ChatCompletionMatcher):
    """Cheaper substitute: shorter prompt, page text truncated."""

    name = "groq"

    def __init__(self, client: AsyncOpenAI | None, model: str, page_char_limit: int = 800, **kwargs):
        super().__init__(client, model, **kwargs)
        self.page_char_limit = page_char_limit

    def _prompt(self, question: str, answer: str, pages: List[PageText]) -> str:
        return SHORT_PROMPT.format(
            question=question,
            answer=answer,
            pages="\n\n".join(f"PAGE {p.page_number}: {p.content[: self.page_char_limit]}" for p in pages),
            first_page=pages[0].page_number,
        )
