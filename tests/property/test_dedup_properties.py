from __future__ import annotations

import string
from datetime import datetime, timedelta, timezone

from hypothesis import given, settings
from hypothesis import strategies as st

from refeed.contracts import Record
from refeed.dedup import classify, merge
from refeed.utils.similarity import cosine, jaccard
from refeed.utils.text_cleaner import normalize_text, tokenize
from refeed.utils.url_canonicalizer import canonicalize_link

NOW = datetime(2025, 7, 1, tzinfo=timezone.utc)

TEXT_STRATEGY = st.text(alphabet=st.characters(blacklist_categories=("Cs",)))
WORDS = st.text(alphabet=string.ascii_lowercase, min_size=3, max_size=8)
TOKENS = st.lists(WORDS, max_size=12)
TAGS = st.lists(st.sampled_from(["electric", "battery", "hybrid", "sales", "safety"]), max_size=4)


@st.composite
def messy_links(draw) -> str:
    scheme = draw(st.sampled_from(["http", "https", "HTTPS", "HtTp"]))
    host = draw(st.text(alphabet=string.ascii_letters, min_size=3, max_size=12))
    suffix = draw(st.sampled_from(["com", "org", "net"]))
    port = draw(st.sampled_from(["", ":80", ":443", ":8080"]))
    segments = draw(st.lists(st.text(alphabet=string.ascii_letters + "-_", max_size=8), max_size=4))
    path = "/" + "/".join(filter(None, segments)) if segments else ""
    query = draw(st.sampled_from(["", "?utm_source=rss", "?id=1&utm_medium=email", "?"]))
    fragment = draw(st.sampled_from(["", "#top", "#"]))
    return f"{scheme}://{host}.{suffix}{port}{path}{query}{fragment}"


@st.composite
def records(draw) -> Record:
    title = " ".join(draw(st.lists(WORDS, min_size=1, max_size=6)))
    description = " ".join(draw(TOKENS))
    hours = draw(st.one_of(st.none(), st.floats(min_value=0, max_value=200)))
    return Record(
        title=title,
        description=description,
        link=draw(messy_links()),
        published_at=None if hours is None else NOW - timedelta(hours=hours),
        source=draw(st.sampled_from(["wire", "newsroom", "blog"])),
        tags=draw(TAGS),
    )


@given(TOKENS, TOKENS)
@settings(max_examples=100)
def test_similarity_measures_are_bounded_and_symmetric(first: list[str], second: list[str]) -> None:
    assert 0.0 <= jaccard(first, second) <= 1.0
    assert 0.0 <= cosine(first, second) <= 1.0
    assert jaccard(first, second) == jaccard(second, first)
    assert cosine(first, second) == cosine(second, first)


@given(TOKENS)
@settings(max_examples=50)
def test_identical_non_empty_token_sets_score_one(tokens: list[str]) -> None:
    if tokens:
        assert jaccard(tokens, list(reversed(tokens))) == 1.0


@given(TEXT_STRATEGY)
@settings(max_examples=100)
def test_tokenizing_normalized_text_changes_nothing(raw: str) -> None:
    normalized = normalize_text(raw)
    assert normalize_text(normalized) == normalized
    assert tokenize(normalized) == tokenize(raw)


@given(messy_links())
@settings(max_examples=100)
def test_canonical_links_are_fixed_points(link: str) -> None:
    canonical = canonicalize_link(link)
    assert canonicalize_link(canonical) == canonical
    assert "?" not in canonical
    assert "#" not in canonical
    assert canonical == canonical.strip()


@given(records(), records())
@settings(max_examples=75)
def test_classification_is_symmetric(first: Record, second: Record) -> None:
    forward = classify(first, second)
    backward = classify(second, first)
    assert forward == backward
    assert forward.is_duplicate == bool(forward.reasons)


@given(records(), records())
@settings(max_examples=75)
def test_shared_canonical_link_always_duplicates(first: Record, second: Record) -> None:
    twin = Record(
        title=second.title,
        description=second.description,
        link=first.canonical_link + "?utm_source=mirror",
        published_at=second.published_at,
        source=second.source,
    )
    result = classify(first, twin)
    assert result.url_exact_match is True
    assert result.is_duplicate is True
    assert result.reasons[0] == "identical-url"


@given(records(), st.lists(records(), min_size=1, max_size=4))
@settings(max_examples=50)
def test_merging_only_grows_collections(canonical: Record, incoming: list[Record]) -> None:
    current = canonical
    for step, item in enumerate(incoming):
        merged = merge(current, item, now=NOW + timedelta(minutes=step))
        assert set(current.alternative_links) <= set(merged.alternative_links)
        assert set(current.tags) <= set(merged.tags)
        assert set(current.sources or (current.source,)) <= set(merged.sources)
        assert canonical.link not in merged.alternative_links
        assert len(merged.description) >= len(current.description)
        assert (merged.id, merged.title, merged.link) == (canonical.id, canonical.title, canonical.link)
        current = merged


@given(records(), records())
@settings(max_examples=50)
def test_remerge_is_idempotent(canonical: Record, incoming: Record) -> None:
    once = merge(canonical, incoming, now=NOW)
    assert merge(once, incoming, now=NOW) == once
