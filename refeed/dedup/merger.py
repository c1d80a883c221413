"""Folding duplicate records into their canonical record."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from refeed.contracts import Record, ordered_unique
from refeed.utils.datetime_utils import coerce_utc, utcnow


def _merge_time(now: Optional[datetime]) -> datetime:
    return coerce_utc(now) or utcnow()


def merge(canonical: Record, incoming: Record, now: Optional[datetime] = None) -> Record:
    """
    Fold ``incoming`` into ``canonical`` and return the new canonical record.

    Identity fields of the canonical (id, title, link, publish time, source)
    never change. The longer description wins; alternate links, sources and
    tags only ever grow. Re-merging the same incoming record with the same
    ``now`` returns an equal record.
    """
    timestamp = _merge_time(now)

    if len(incoming.description) > len(canonical.description):
        description = incoming.description
    else:
        description = canonical.description

    alternative_links = ordered_unique(
        link
        for link in (*canonical.alternative_links, incoming.link)
        if link != canonical.link
    )
    sources = ordered_unique((*(canonical.sources or (canonical.source,)), incoming.source))
    tags = ordered_unique((*canonical.tags, *incoming.tags))

    return canonical.model_copy(
        update={
            "description": description,
            "alternative_links": alternative_links,
            "sources": sources,
            "tags": tags,
            "updated_at": timestamp,
            "last_duplicate_found": timestamp,
        }
    )


def refresh(stored: Record, incoming: Record, now: Optional[datetime] = None) -> Record:
    """
    Apply a re-published version of the same record (same id).

    Text and publish time come from ``incoming``; merge history (alternate
    links, sources, duplicate timestamp, creation time) stays with ``stored``.
    """
    return stored.model_copy(
        update={
            "title": incoming.title or stored.title,
            "description": incoming.description,
            "published_at": incoming.published_at or stored.published_at,
            "tags": ordered_unique((*stored.tags, *incoming.tags)),
            "updated_at": _merge_time(now),
        }
    )


__all__ = ["merge", "refresh"]
