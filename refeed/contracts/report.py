"""Report contract summarizing a batch of duplicate matches."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReportDetail(BaseModel):
    matched_id: str
    similarity_percent: int = Field(ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class DuplicateReport(BaseModel):
    """Human- and machine-readable duplicate summary.

    ``count`` and ``details`` are only present when duplicates were found, so
    an empty report serializes to ``{"hasDuplicates": false}``.
    """

    has_duplicates: bool
    count: Optional[int] = None
    details: Optional[List[ReportDetail]] = None

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def summary(self) -> str:
        if not self.has_duplicates:
            return "No duplicates found"
        parts = [
            f"{detail.matched_id} ({detail.similarity_percent}%: "
            f"{', '.join(detail.reasons) or 'no reasons'})"
            for detail in self.details or []
        ]
        return f"{self.count} duplicate(s): " + "; ".join(parts)


__all__ = ["DuplicateReport", "ReportDetail"]
