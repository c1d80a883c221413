from __future__ import annotations

import re
from typing import AbstractSet, Iterable, List, Optional

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")

MIN_TOKEN_LENGTH = 3

# English function words plus publisher noise that every feed item repeats.
STOP_WORDS: frozenset[str] = frozenset(
    {
        "a",
        "an",
        "and",
        "are",
        "as",
        "at",
        "be",
        "by",
        "for",
        "from",
        "has",
        "he",
        "in",
        "is",
        "it",
        "its",
        "of",
        "on",
        "that",
        "the",
        "to",
        "was",
        "will",
        "with",
        "toyota",
        "new",
    }
)

TAG_KEYWORDS: tuple[str, ...] = (
    "electric",
    "hybrid",
    "ev",
    "battery",
    "sustainability",
    "carbon",
    "green",
    "technology",
    "innovation",
    "ai",
    "safety",
    "autonomous",
    "mobility",
    "manufacturing",
    "production",
    "factory",
    "sales",
    "market",
    "financial",
    "partnership",
    "collaboration",
)


def normalize_text(text: Optional[str]) -> str:
    """Lower-case, turn punctuation into spaces and collapse whitespace."""
    if not isinstance(text, str) or not text:
        return ""
    text = text.lower()
    text = _NON_WORD.sub(" ", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip()


def build_stop_words(extra: Iterable[str] = ()) -> frozenset[str]:
    extra_words = {normalize_text(word) for word in extra}
    extra_words.discard("")
    if not extra_words:
        return STOP_WORDS
    return STOP_WORDS | extra_words


def tokenize(
    text: Optional[str],
    stop_words: Optional[AbstractSet[str]] = None,
    min_length: int = MIN_TOKEN_LENGTH,
) -> List[str]:
    """
    Split normalized text into tokens, dropping short tokens and stop words.

    Token order is preserved; term frequencies matter for cosine scoring.
    """
    words = STOP_WORDS if stop_words is None else stop_words
    return [
        token
        for token in normalize_text(text).split()
        if len(token) >= min_length and token not in words
    ]


def extract_tags(
    title: Optional[str],
    description: Optional[str],
    keywords: Iterable[str] = TAG_KEYWORDS,
) -> List[str]:
    """Return the keywords found (as substrings) in title and description."""
    haystack = f"{title or ''} {description or ''}".lower()
    return [keyword for keyword in keywords if keyword in haystack]


__all__ = [
    "MIN_TOKEN_LENGTH",
    "STOP_WORDS",
    "TAG_KEYWORDS",
    "build_stop_words",
    "extract_tags",
    "normalize_text",
    "tokenize",
]
