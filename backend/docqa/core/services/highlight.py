from __future__ import annotations
import re
from typing import List
from urllib.parse import quote

_PUNCT = re.compile(r"[^\w\s]")


def highlight_terms(quote_text: str, max_words: int = 3) -> List[str]:
    words = _PUNCT.sub(" ", quote_text or "").split()
    return [w for w in words if len(w) > 3][:max_words]


def build_link(base_url: str, page: int, quote_text: str) -> str:
    """
    Viewer deep link: `#page=N&search=w1 w2 w3`. The search part is only a hint for
    the PDF viewer's own find feature and can miss on ligatures or hyphenation.
    """
    base = base_url.split("#", 1)[0]
    terms = highlight_terms(quote_text)
    if not terms:
        return f"{base}#page={page}"
    return f"{base}#page={page}&search={quote(' '.join(terms), safe='')}"
