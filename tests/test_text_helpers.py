"""
Tests for slugs, tags, highlighting, mentions and relative times.
"""
from datetime import datetime, timedelta, timezone

import pytest

from myblog.services.highlight import excerpt, highlight
from myblog.services.mentions import mentioned_nicknames, parse_mentions
from myblog.services.posts import PostValidationError, clean_tags, validate_post
from myblog.services.slugify import parse_tags, random_suffix, slugify, with_random_suffix
from myblog.services.time_ago import time_ago


class TestSlugify:
    def test_basic(self):
        assert slugify("Hello, World!") == "hello-world"
        assert slugify("Hello, World!  Foo") == "hello-world-foo"

    def test_empty(self):
        assert slugify("") == ""

    def test_collapses_spaces_and_hyphens(self):
        assert slugify("  a  --  b   c ") == "a-b-c"

    def test_keeps_non_latin_letters(self):
        assert slugify("안녕 하세요 World") == "안녕-하세요-world"

    def test_truncates(self):
        assert slugify("a" * 200) == "a" * 50
        assert len(slugify("word " * 40)) == 50

    def test_punctuation_only(self):
        assert slugify("?!#") == ""

    def test_suffix(self):
        suffix = random_suffix()
        assert len(suffix) == 6
        assert suffix.isalnum() and suffix == suffix.lower()
        assert with_random_suffix("post", "abc123") == "post-abc123"


class TestTags:
    def test_parse(self):
        assert parse_tags(" a, b ,, c ") == ["a", "b", "c"]

    def test_limit(self):
        assert parse_tags("1,2,3,4,5,6,7") == ["1", "2", "3", "4", "5"]

    def test_empty(self):
        assert parse_tags("") == []
        assert parse_tags(None) == []

    def test_clean_tags_rejects_only_commas(self):
        with pytest.raises(PostValidationError):
            clean_tags(" , ,")

    def test_clean_tags_list(self):
        assert clean_tags(["x", " y "]) == ["x", "y"]


class TestValidatePost:
    def test_trims(self):
        assert validate_post("  Title ", " Body ") == ("Title", "Body")

    def test_blank(self):
        with pytest.raises(PostValidationError):
            validate_post("Title", "   ")

    def test_title_length(self):
        with pytest.raises(PostValidationError):
            validate_post("x" * 201, "Body")


class TestHighlight:
    def test_case_insensitive(self):
        spans = highlight("Python and python", "PYTHON")
        assert [(s.text, s.matched) for s in spans] == [("Python", True), (" and ", False), ("python", True)]

    def test_lossless(self):
        text = "a.b.c a.b"
        assert "".join(s.text for s in highlight(text, "a.b")) == text

    def test_regex_characters_are_literal(self):
        spans = highlight("axb a.b", "a.b")
        assert [s.text for s in spans if s.matched] == ["a.b"]

    def test_no_match_or_blank_query(self):
        assert [s.text for s in highlight("hello", "zzz")] == ["hello"]
        assert not highlight("hello", "  ")[0].matched

    def test_excerpt(self):
        assert excerpt("short") == "short"
        assert excerpt("x" * 200) == "x" * 150 + "..."


class TestMentions:
    def test_parts(self):
        parts = parse_mentions("hi @alice and @bob!")
        assert [(p.text, p.nickname) for p in parts] == [
            ("hi ", None),
            ("@alice", "alice"),
            (" and ", None),
            ("@bob!", "bob!"),
        ]

    def test_lossless(self):
        text = "@a b @c"
        assert "".join(p.text for p in parse_mentions(text)) == text

    def test_no_mentions(self):
        parts = parse_mentions("plain text")
        assert len(parts) == 1 and not parts[0].is_mention

    def test_lone_at_sign(self):
        assert mentioned_nicknames("email me @ home") == []
        assert mentioned_nicknames("@one @two") == ["one", "two"]


class TestTimeAgo:
    NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def ago(self, **delta):
        return time_ago(self.NOW - timedelta(**delta), self.NOW)

    def test_ranges(self):
        assert self.ago(seconds=30) == "just now"
        assert self.ago(minutes=1) == "1 minute ago"
        assert self.ago(minutes=5) == "5 minutes ago"
        assert self.ago(hours=3) == "3 hours ago"
        assert self.ago(days=2) == "2 days ago"
        assert self.ago(days=14) == "2 weeks ago"
        assert self.ago(days=60) == "2 months ago"
        assert self.ago(days=365 * 2) == "2 years ago"

    def test_between_months_and_years(self):
        assert self.ago(days=362) == "1 year ago"

    def test_naive_is_utc(self):
        naive = datetime(2024, 6, 1, 11, 0)
        assert time_ago(naive, self.NOW) == "1 hour ago"

    def test_future_is_just_now(self):
        assert self.ago(minutes=-5) == "just now"
