"""Near-duplicate detection and merge engine for republished news records.

Public operations are loaded lazily so that importing the configuration
tooling (``refeed.config_manager``) stays light.
"""
from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Iterable

_MODULE_ATTRS: Dict[str, Iterable[str]] = {
    "refeed.utils.text_cleaner": ["normalize_text", "tokenize", "extract_tags", "STOP_WORDS"],
    "refeed.utils.url_canonicalizer": ["canonicalize_link"],
    "refeed.utils.similarity": ["jaccard", "cosine", "record_id"],
    "refeed.contracts": [
        "ClassifierConfig",
        "DuplicateMatch",
        "DuplicateReport",
        "Record",
        "SimilarityResult",
    ],
    "refeed.dedup": [
        "DuplicateDetector",
        "IngestDecision",
        "build_report",
        "classify",
        "find_duplicates",
        "merge",
        "select_canonical",
        "select_window",
        "summarize_batch",
    ],
    "refeed.config_manager": ["ConfigError", "load_config"],
}

_ATTR_TO_MODULE: Dict[str, str] = {
    attribute: module for module, attributes in _MODULE_ATTRS.items() for attribute in attributes
}

__all__ = sorted(_ATTR_TO_MODULE)


def __getattr__(name: str) -> Any:
    module_name = _ATTR_TO_MODULE.get(name)
    if module_name is None:
        raise AttributeError(f"module 'refeed' has no attribute {name!r}")
    value = getattr(import_module(module_name), name)
    globals()[name] = value
    return value
