"""Duplicate classification, merging and reporting."""

from .classifier import DEFAULT_CLASSIFIER_CONFIG, as_config, as_record, classify
from .detector import (
    DuplicateDetector,
    IngestDecision,
    find_duplicates,
    scan_window,
    select_canonical,
    summarize_batch,
)
from .merger import merge, refresh
from .report import build_report, similarity_percent
from .window import select_window

__all__ = [
    "DEFAULT_CLASSIFIER_CONFIG",
    "DuplicateDetector",
    "IngestDecision",
    "as_config",
    "as_record",
    "build_report",
    "classify",
    "find_duplicates",
    "merge",
    "refresh",
    "scan_window",
    "select_canonical",
    "select_window",
    "similarity_percent",
    "summarize_batch",
]
