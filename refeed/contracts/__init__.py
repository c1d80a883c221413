"""Shared contracts for validated engine payloads."""

from .record import Record, ordered_unique
from .report import DuplicateReport, ReportDetail
from .similarity import (
    REASON_CONTENT,
    REASON_IDENTICAL_URL,
    REASON_TITLE_TIME,
    ClassifierConfig,
    DuplicateMatch,
    SimilarityResult,
)

__all__ = [
    "REASON_CONTENT",
    "REASON_IDENTICAL_URL",
    "REASON_TITLE_TIME",
    "ClassifierConfig",
    "DuplicateMatch",
    "DuplicateReport",
    "Record",
    "ReportDetail",
    "SimilarityResult",
    "ordered_unique",
]
