"""Rule-based duplicate classifier for record pairs."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping, Optional, Union

from refeed.contracts import (
    REASON_CONTENT,
    REASON_IDENTICAL_URL,
    REASON_TITLE_TIME,
    ClassifierConfig,
    Record,
    SimilarityResult,
)
from refeed.utils.datetime_utils import hours_between
from refeed.utils.similarity import cosine, jaccard
from refeed.utils.text_cleaner import build_stop_words, tokenize

RecordLike = Union[Record, Mapping[str, Any]]
ConfigLike = Union[ClassifierConfig, Mapping[str, Any]]

DEFAULT_CLASSIFIER_CONFIG = ClassifierConfig()

_stop_words_for = lru_cache(maxsize=32)(build_stop_words)


def as_record(value: RecordLike) -> Record:
    if isinstance(value, Record):
        return value
    return Record.model_validate(value)


def as_config(value: Optional[ConfigLike]) -> ClassifierConfig:
    if value is None:
        return DEFAULT_CLASSIFIER_CONFIG
    if isinstance(value, ClassifierConfig):
        return value
    return ClassifierConfig.model_validate(value)


def classify(
    candidate: RecordLike,
    existing: RecordLike,
    config: Optional[ConfigLike] = None,
) -> SimilarityResult:
    """
    Score a candidate against one existing record and decide duplication.

    Three independent rules, OR-composed, each adding its label to
    ``reasons`` in this order:

    - ``identical-url``: canonical links are equal (empty links never match).
    - ``title-match-time-proximate``: title Jaccard reaches
      ``title_similarity_threshold`` and the publish times are within
      ``time_proximity_hours``.
    - ``content-match``: Jaccard over title + description reaches
      ``similarity_threshold``.

    Content cosine is reported but never decides the verdict. Missing publish
    times count as not proximate.
    """
    cfg = as_config(config)
    first = as_record(candidate)
    second = as_record(existing)
    stop_words = _stop_words_for(cfg.extra_stop_words)

    title_similarity = jaccard(
        tokenize(first.title, stop_words), tokenize(second.title, stop_words)
    )
    content_first = tokenize(first.content_text, stop_words)
    content_second = tokenize(second.content_text, stop_words)
    content_jaccard = jaccard(content_first, content_second)
    content_cosine = cosine(content_first, content_second)

    url_exact_match = bool(first.canonical_link) and first.canonical_link == second.canonical_link
    distance = hours_between(first.published_at, second.published_at)
    time_proximate = distance is not None and distance <= cfg.time_proximity_hours

    reasons: list[str] = []
    if url_exact_match:
        reasons.append(REASON_IDENTICAL_URL)
    if title_similarity >= cfg.title_similarity_threshold and time_proximate:
        reasons.append(REASON_TITLE_TIME)
    if content_jaccard >= cfg.similarity_threshold:
        reasons.append(REASON_CONTENT)

    return SimilarityResult(
        title_similarity=title_similarity,
        content_jaccard=content_jaccard,
        content_cosine=content_cosine,
        url_exact_match=url_exact_match,
        time_proximate=time_proximate,
        is_duplicate=bool(reasons),
        reasons=tuple(reasons),
    )


__all__ = [
    "ConfigLike",
    "DEFAULT_CLASSIFIER_CONFIG",
    "RecordLike",
    "as_config",
    "as_record",
    "classify",
]
