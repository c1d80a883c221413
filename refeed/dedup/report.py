from __future__ import annotations

import math
from typing import Sequence

from refeed.contracts import DuplicateMatch, DuplicateReport, ReportDetail


def similarity_percent(score: float) -> int:
    """Score in [0, 1] as an integer percentage, halves rounded up."""
    return max(0, min(100, int(math.floor(score * 100 + 0.5))))


def build_report(matches: Sequence[DuplicateMatch]) -> DuplicateReport:
    """Summarize duplicate matches; an empty input reports no duplicates."""
    if not matches:
        return DuplicateReport(has_duplicates=False)
    details = [
        ReportDetail(
            matched_id=match.matched_record_id,
            similarity_percent=similarity_percent(match.result.content_jaccard),
            reasons=list(match.result.reasons),
        )
        for match in matches
    ]
    return DuplicateReport(has_duplicates=True, count=len(details), details=details)


__all__ = ["build_report", "similarity_percent"]
