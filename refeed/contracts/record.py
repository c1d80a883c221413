"""Contract for ingested feed records."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from refeed.utils import url_canonicalizer
from refeed.utils.datetime_utils import coerce_utc, utcnow
from refeed.utils.similarity import record_id
from refeed.utils.text_cleaner import extract_tags

DEFAULT_TITLE = "No Title"


def ordered_unique(values: Iterable[Any]) -> Tuple[str, ...]:
    """Deduplicate while keeping first-occurrence order; blanks are dropped."""
    cleaned = (str(value).strip() for value in values if value is not None)
    return tuple(dict.fromkeys(value for value in cleaned if value))


class Record(BaseModel):
    """A single ingested item, immutable once validated.

    ``canonical_link`` is derived from ``link`` and ``id`` from
    ``(title, canonical_link)`` whenever the caller leaves them blank.
    ``tags``, ``sources`` and ``alternative_links`` are ordered sets.
    """

    id: str = ""
    title: str = ""
    description: str = ""
    link: str = ""
    canonical_link: str = ""
    published_at: Optional[datetime] = None
    source: str = ""
    category: Optional[str] = None
    tags: Tuple[str, ...] = ()
    alternative_links: Tuple[str, ...] = ()
    sources: Tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_duplicate_found: Optional[datetime] = None

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @field_validator(
        "id", "title", "description", "link", "canonical_link", "source", mode="before"
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator(
        "published_at", "created_at", "updated_at", "last_duplicate_found", mode="before"
    )
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> Optional[datetime]:
        return coerce_utc(value)

    @field_validator("tags", "alternative_links", "sources", mode="before")
    @classmethod
    def _coerce_ordered_set(cls, value: Any) -> Tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            return ordered_unique([value])
        if isinstance(value, (list, tuple, set, frozenset)):
            return ordered_unique(value)
        raise ValueError("expected a string or a collection of strings")

    @model_validator(mode="after")
    def _derive_identity(self) -> "Record":
        if not self.canonical_link and self.link:
            object.__setattr__(
                self, "canonical_link", url_canonicalizer.canonicalize_link(self.link)
            )
        if not self.id:
            object.__setattr__(self, "id", record_id(self.title, self.canonical_link))
        if self.link and self.link in self.alternative_links:
            object.__setattr__(
                self,
                "alternative_links",
                tuple(link for link in self.alternative_links if link != self.link),
            )
        return self

    @property
    def content_text(self) -> str:
        """Title and description joined, the basis for content similarity."""
        return f"{self.title} {self.description}"

    @classmethod
    def from_item(
        cls,
        item: Mapping[str, Any],
        source: str,
        category: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "Record":
        """Build a record from an already-parsed feed item mapping."""
        timestamp = now or utcnow()
        title = item.get("title") or DEFAULT_TITLE
        description = item.get("description") or item.get("summary") or ""
        published = (
            item.get("published_at")
            or item.get("pubDate")
            or item.get("published")
            or item.get("isoDate")
        )
        published_at = coerce_utc(published) if published else timestamp
        return cls(
            title=title,
            link=item.get("link") or "",
            description=description,
            published_at=published_at,
            source=source,
            category=category,
            tags=item.get("tags") or extract_tags(title, description),
            created_at=timestamp,
            updated_at=timestamp,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready payload using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


__all__ = ["DEFAULT_TITLE", "Record", "ordered_unique"]
