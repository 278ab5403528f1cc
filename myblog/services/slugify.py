"""
URL slugs and tag parsing for posts.
"""
import re
import secrets
import string
from typing import List, Optional

SLUG_MAX_LENGTH = 50
SUFFIX_LENGTH = 6
MAX_TAGS = 5

_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
_DISALLOWED = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(title: str) -> str:
    """
    Turn a post title into a URL slug.

    Lowercases, drops punctuation (letters of any script, digits, spaces and
    hyphens survive), joins words with single hyphens and cuts the result to
    50 characters.
    """
    slug = title.lower().strip()
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    slug = slug.strip("-")
    return slug[:SLUG_MAX_LENGTH]


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(length))


def with_random_suffix(slug: str, suffix: Optional[str] = None) -> str:
    return f"{slug}-{suffix or random_suffix()}"


def parse_tags(text: Optional[str]) -> List[str]:
    """Split comma separated tags, dropping blanks and keeping the first five."""
    if not text:
        return []
    tags = [tag.strip() for tag in text.split(",")]
    return [tag for tag in tags if tag][:MAX_TAGS]
