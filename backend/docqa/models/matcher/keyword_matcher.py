from __future__ import annotations
import re
from typing import List, Tuple

from docqa.core.entities import Citation, ExtractionResult, PageText, Relevance
from docqa.core.ports.matcher import ISourceMatcher

_WORD = re.compile(r"[^\W_]+", re.U)
_HEADING = re.compile(r"^[A-Z][^.\n]{9,59}$")

STOPWORDS = frozenset({
    "what", "which", "when", "where", "who", "whom", "whose", "why", "how",
    "does", "have", "there", "their", "them", "they", "this", "that", "these",
    "those", "with", "from", "into", "about", "would", "could", "should",
    "will", "shall", "been", "were", "being", "some", "such", "than", "then",
    "also", "only", "your", "other", "please", "tell", "describe", "explain",
})
_SUFFIXES = ("ations", "ation", "ments", "ment", "ings", "ing", "ions", "ion", "ies", "ed", "es", "s")
_RELEVANCE_WEIGHT = {Relevance.HIGH: 0.3, Relevance.MEDIUM: 0.2, Relevance.LOW: 0.1}


def question_keywords(question: str) -> List[str]:
    words = [w.lower() for w in _WORD.findall(question or "")]
    return [w for w in dict.fromkeys(words) if len(w) > 3 and w not in STOPWORDS]


def stem(word: str) -> str:
    for suffix in _SUFFIXES:
        if word.endswith(suffix) and len(word) - len(suffix) >= 4:
            return word[: -len(suffix)]
    return word


def find_keyword(haystack: str, keyword: str) -> int:
    idx = haystack.find(keyword)
    if idx == -1:
        root = stem(keyword)
        if root != keyword:
            idx = haystack.find(root)
    return idx


def infer_section(content: str, page: int) -> str:
    for line in content.splitlines():
        line = line.strip()
        if _HEADING.match(line):
            return line
    return f"Page {page}"


def classify(matches: int, keyword_count: int) -> Relevance:
    if keyword_count and matches >= 0.7 * keyword_count:
        return Relevance.HIGH
    if keyword_count and matches >= 0.3 * keyword_count:
        return Relevance.MEDIUM
    return Relevance.LOW


class KeywordOverlapMatcher(ISourceMatcher):
    """
    Deterministic last resort: every page yields one citation built around the
    first hit of each question keyword, ranked by how many keywords hit.
    Placeholder pages carry no evidence and produce no citation.
    """

    name = "keyword"

    def __init__(self, before: int = 100, after: int = 300, ctx_before: int = 200, ctx_after: int = 400):
        self.before, self.after = before, after
        self.ctx_before, self.ctx_after = ctx_before, ctx_after

    def is_available(self) -> bool:
        return True

    def _page_citation(self, page: PageText, keywords: List[str]) -> Citation:
        content = page.content
        lowered = content.lower()
        matches = 0
        excerpt, context = "", ""
        for kw in keywords:
            idx = find_keyword(lowered, kw)
            if idx == -1:
                continue
            matches += 1
            chunk = content[max(0, idx - self.before): idx + self.after]
            if len(chunk) > len(excerpt):
                excerpt = chunk
                context = content[max(0, idx - self.ctx_before): idx + self.ctx_after]

        if matches == 0:
            excerpt, context = content[:300], content[:500]

        return Citation(
            page=page.page_number,
            section=infer_section(content, page.page_number),
            exact_text=excerpt.strip(),
            relevance=classify(matches, len(keywords)),
            context=context.strip(),
        )

    def score(self, citations: List[Citation]) -> float:
        if not citations:
            return 0.3
        return min(0.8, sum(_RELEVANCE_WEIGHT[c.relevance] for c in citations))

    async def match(self, question: str, answer: str, pages: List[PageText]) -> ExtractionResult:
        keywords = question_keywords(question)
        citations = [self._page_citation(p, keywords) for p in pages if p.extracted]
        return ExtractionResult(sources=citations, confidence=round(self.score(citations), 4), strategy=self.name)
