"""Contracts exchanged between the classifier and its callers."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

REASON_IDENTICAL_URL = "identical-url"
REASON_TITLE_TIME = "title-match-time-proximate"
REASON_CONTENT = "content-match"


class _FrozenContract(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class ClassifierConfig(_FrozenContract):
    """Thresholds for the duplicate rules, with the documented defaults."""

    similarity_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    title_similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    time_proximity_hours: float = Field(default=48.0, ge=0.0)
    extra_stop_words: Tuple[str, ...] = ()

    @field_validator("extra_stop_words", mode="before")
    @classmethod
    def _normalize_stop_words(cls, value: Any) -> Tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        words = (str(word).strip().lower() for word in value)
        return tuple(sorted({word for word in words if word}))

    @classmethod
    def from_settings(
        cls,
        classifier: Optional[Mapping[str, Any]] = None,
        normalizer: Optional[Mapping[str, Any]] = None,
    ) -> "ClassifierConfig":
        """Build from the ``classifier``/``normalizer`` config sections."""
        if classifier is None or normalizer is None:
            from config.settings import CLASSIFIER_CONFIG, NORMALIZER_CONFIG

            classifier = CLASSIFIER_CONFIG if classifier is None else classifier
            normalizer = NORMALIZER_CONFIG if normalizer is None else normalizer
        return cls(
            similarity_threshold=classifier.get("similarity_threshold", 0.8),
            title_similarity_threshold=classifier.get("title_similarity_threshold", 0.7),
            time_proximity_hours=classifier.get("time_proximity_hours", 48.0),
            extra_stop_words=normalizer.get("extra_stop_words", ()),
        )


class SimilarityResult(_FrozenContract):
    """Scores and verdict for one candidate/existing pair."""

    title_similarity: float = Field(ge=0.0, le=1.0)
    content_jaccard: float = Field(ge=0.0, le=1.0)
    content_cosine: float = Field(ge=0.0, le=1.0)
    url_exact_match: bool
    time_proximate: bool
    is_duplicate: bool
    reasons: Tuple[str, ...] = ()


class DuplicateMatch(_FrozenContract):
    """A window record the candidate duplicates, with the scores that matched."""

    matched_record_id: str
    result: SimilarityResult


__all__ = [
    "REASON_CONTENT",
    "REASON_IDENTICAL_URL",
    "REASON_TITLE_TIME",
    "ClassifierConfig",
    "DuplicateMatch",
    "SimilarityResult",
]
