"""
@mention parsing for comment bodies.
"""
import re
from dataclasses import dataclass
from typing import List, Optional

MENTION_PATTERN = re.compile(r"@(\S+)")


@dataclass(frozen=True)
class ContentPart:
    text: str
    nickname: Optional[str] = None

    @property
    def is_mention(self) -> bool:
        return self.nickname is not None


def parse_mentions(content: str) -> List[ContentPart]:
    """Split comment text into plain parts and @nickname parts.

    Joining the part texts gives back ``content`` exactly.
    """
    parts: List[ContentPart] = []
    last = 0
    for match in MENTION_PATTERN.finditer(content):
        if match.start() > last:
            parts.append(ContentPart(content[last:match.start()]))
        parts.append(ContentPart(match.group(0), nickname=match.group(1)))
        last = match.end()
    if last < len(content):
        parts.append(ContentPart(content[last:]))
    return parts or [ContentPart(content)]


def mentioned_nicknames(content: str) -> List[str]:
    return [part.nickname for part in parse_mentions(content) if part.is_mention]
