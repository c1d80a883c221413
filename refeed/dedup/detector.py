"""
Window scans, canonical selection and the ingest decision for one candidate.

The module-level functions are pure and safe to call from any thread. The
:class:`DuplicateDetector` facade adds configuration defaults, structured
logging and metrics around them for callers that ingest feeds.
"""

from __future__ import annotations

import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from refeed.contracts import (
    ClassifierConfig,
    DuplicateMatch,
    DuplicateReport,
    Record,
    SimilarityResult,
)
from refeed.dedup.classifier import ConfigLike, RecordLike, as_config, as_record, classify
from refeed.dedup.merger import merge, refresh
from refeed.dedup.report import build_report
from refeed.utils.logger import get_logger
from refeed.utils.metrics import MetricsReporter, get_metrics_reporter

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from refeed.utils.logger import EngineLogger

IngestAction = Literal["new", "updated", "merged", "unchanged"]


def scan_window(
    candidate: Record,
    window: Sequence[Record],
    config: ClassifierConfig,
    max_workers: Optional[int] = None,
) -> List[Tuple[Record, SimilarityResult]]:
    """Classify ``candidate`` against every window record, keeping window order."""
    compare = partial(classify, candidate, config=config)
    if max_workers and max_workers > 1 and len(window) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(window))) as executor:
            # map() yields in submission order whatever order the workers finish in
            results = list(executor.map(compare, window))
    else:
        results = [compare(existing) for existing in window]
    return list(zip(window, results))


def find_duplicates(
    candidate: RecordLike,
    window: Iterable[RecordLike],
    config: Optional[ConfigLike] = None,
    *,
    max_workers: Optional[int] = None,
) -> List[DuplicateMatch]:
    """Return the window records the candidate duplicates, in window order."""
    records = [as_record(existing) for existing in window]
    scanned = scan_window(as_record(candidate), records, as_config(config), max_workers)
    return [
        DuplicateMatch(matched_record_id=existing.id, result=result)
        for existing, result in scanned
        if result.is_duplicate
    ]


def select_canonical(matches: Sequence[DuplicateMatch]) -> Optional[DuplicateMatch]:
    """The earliest match in window order is the merge target."""
    return matches[0] if matches else None


@dataclass(frozen=True)
class IngestDecision:
    """What the caller should persist for one incoming record."""

    action: IngestAction
    record: Record
    target_id: Optional[str] = None
    matches: Tuple[DuplicateMatch, ...] = field(default_factory=tuple)


def summarize_batch(decisions: Iterable[IngestDecision]) -> Dict[str, int]:
    """Per-action counts for a batch of ingest decisions."""
    counts = Counter(decision.action for decision in decisions)
    return {
        "total": sum(counts.values()),
        "new": counts["new"],
        "updated": counts["updated"],
        "duplicates": counts["merged"],
        "unchanged": counts["unchanged"],
    }


class DuplicateDetector:
    """Configured entry point used by ingestion code."""

    def __init__(
        self,
        config: Optional[ConfigLike] = None,
        *,
        max_workers: Optional[int] = None,
        logger_factory: Optional["EngineLogger"] = None,
        metrics: Optional[MetricsReporter] = None,
    ) -> None:
        self.config = as_config(config) if config is not None else ClassifierConfig.from_settings()
        if max_workers is None:
            from config.settings import ENGINE_CONFIG

            max_workers = ENGINE_CONFIG.get("max_workers", 1)
        self.max_workers = max_workers
        self.logger_factory: "EngineLogger" = logger_factory or get_logger()
        self.module_logger = self.logger_factory.create_module_logger("dedup.detector")
        self.metrics = metrics or get_metrics_reporter()

    def classify(self, candidate: RecordLike, existing: RecordLike) -> SimilarityResult:
        result = classify(candidate, existing, self.config)
        self._emit_log(
            "debug",
            "dedup.classify.completed",
            is_duplicate=result.is_duplicate,
            reasons=list(result.reasons),
        )
        return result

    def find_duplicates(
        self, candidate: RecordLike, window: Iterable[RecordLike]
    ) -> List[DuplicateMatch]:
        record = as_record(candidate)
        records = [as_record(existing) for existing in window]
        return self._matches(self._scan(record, records))

    def merge(
        self, canonical: Record, incoming: Record, now: Optional[datetime] = None
    ) -> Record:
        merged = merge(canonical, incoming, now)
        self.metrics.record_merge(canonical_id=canonical.id, incoming_id=incoming.id)
        self._emit_log(
            "info",
            "dedup.merge.applied",
            canonical_id=canonical.id,
            incoming_id=incoming.id,
            sources=len(merged.sources),
            alternative_links=len(merged.alternative_links),
        )
        return merged

    def build_report(self, matches: Sequence[DuplicateMatch]) -> DuplicateReport:
        return build_report(matches)

    def resolve(
        self,
        candidate: RecordLike,
        window: Iterable[RecordLike],
        now: Optional[datetime] = None,
    ) -> IngestDecision:
        """
        Decide how an incoming record lands against the stored window.

        A stored record with the same id is refreshed when its text changed.
        Otherwise the candidate is merged into the first duplicate in window
        order, or kept as a new record when nothing matches.
        """
        record = as_record(candidate)
        records = [as_record(existing) for existing in window]

        stored = next((existing for existing in records if existing.id == record.id), None)
        if stored is not None:
            if stored.title != record.title or stored.description != record.description:
                decision = IngestDecision(
                    "updated", refresh(stored, record, now), target_id=stored.id
                )
            else:
                decision = IngestDecision("unchanged", stored, target_id=stored.id)
        else:
            scanned = self._scan(record, records)
            matches = self._matches(scanned)
            if not matches:
                decision = IngestDecision("new", record)
            else:
                target = next(existing for existing, result in scanned if result.is_duplicate)
                decision = IngestDecision(
                    "merged",
                    self.merge(target, record, now),
                    target_id=target.id,
                    matches=tuple(matches),
                )

        self._emit_log(
            "info",
            "dedup.resolve.decided",
            candidate_id=record.id,
            action=decision.action,
            target_id=decision.target_id,
        )
        return decision

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _scan(
        self, record: Record, records: Sequence[Record]
    ) -> List[Tuple[Record, SimilarityResult]]:
        start = time.perf_counter()
        scanned = scan_window(record, records, self.config, self.max_workers)
        latency = time.perf_counter() - start
        duplicates = sum(1 for _, result in scanned if result.is_duplicate)
        self.metrics.record_window_scan(
            candidate_id=record.id,
            window_size=len(records),
            duplicates=duplicates,
            latency=latency,
        )
        self._emit_log(
            "info",
            "dedup.window.scanned",
            candidate_id=record.id,
            window_size=len(records),
            duplicates=duplicates,
            latency=round(latency, 6),
        )
        return scanned

    @staticmethod
    def _matches(
        scanned: Sequence[Tuple[Record, SimilarityResult]],
    ) -> List[DuplicateMatch]:
        return [
            DuplicateMatch(matched_record_id=existing.id, result=result)
            for existing, result in scanned
            if result.is_duplicate
        ]

    def _emit_log(self, level: str, event: str, **details: Any) -> None:
        payload: Dict[str, Any] = {"event": event}
        payload.update({key: value for key, value in details.items() if value is not None})
        getattr(self.module_logger, level)(payload)


__all__ = [
    "DuplicateDetector",
    "IngestAction",
    "IngestDecision",
    "find_duplicates",
    "scan_window",
    "select_canonical",
    "summarize_batch",
]
