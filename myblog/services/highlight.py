"""
Search-term highlighting.
"""
import re
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Span:
    text: str
    matched: bool = False


def highlight(text: str, query: str) -> List[Span]:
    """Split ``text`` into plain and matched spans for every occurrence of ``query``.

    Matching is case-insensitive and literal. Joining the span texts gives
    back ``text`` exactly.
    """
    if not query or not query.strip():
        return [Span(text)]

    spans: List[Span] = []
    last = 0
    for match in re.finditer(re.escape(query), text, flags=re.IGNORECASE):
        if match.start() > last:
            spans.append(Span(text[last:match.start()]))
        spans.append(Span(match.group(0), matched=True))
        last = match.end()
    if last < len(text):
        spans.append(Span(text[last:]))
    return spans or [Span(text)]


def excerpt(text: str, length: int = 150) -> str:
    """Trim post content for a search result card."""
    text = " ".join(text.split())
    if len(text) <= length:
        return text
    return text[:length].rstrip() + "..."
