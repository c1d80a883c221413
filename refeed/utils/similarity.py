"""Token-set similarity measures and record identity hashing."""

from __future__ import annotations

import hashlib
import math
from collections import Counter
from typing import Sequence


def jaccard(tokens_a: Sequence[str], tokens_b: Sequence[str]) -> float:
    """|distinct intersection| / |distinct union|; 0.0 when both are empty."""
    set_a = set(tokens_a)
    set_b = set(tokens_b)
    union = len(set_a | set_b)
    if union == 0:
        return 0.0
    return len(set_a & set_b) / union


def cosine(tokens_a: Sequence[str], tokens_b: Sequence[str]) -> float:
    """Cosine of the term-frequency vectors; 0.0 when either vector is zero."""
    counts_a = Counter(tokens_a)
    counts_b = Counter(tokens_b)
    magnitude_a = math.sqrt(sum(count * count for count in counts_a.values()))
    magnitude_b = math.sqrt(sum(count * count for count in counts_b.values()))
    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0
    dot = sum(count * counts_b[token] for token, count in counts_a.items())
    # Identical vectors can land a hair above 1.0 in floating point.
    return min(1.0, dot / (magnitude_a * magnitude_b))


def record_id(title: str, canonical_link: str) -> str:
    """Stable record identifier derived from title and canonical link."""
    content = f"{(title or '').lower().strip()}-{canonical_link or ''}"
    return hashlib.md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()


__all__ = ["cosine", "jaccard", "record_id"]
