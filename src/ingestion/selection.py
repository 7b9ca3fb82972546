"""
Candidate selection: tag filtering, title normalization and deduplication.

The passes run in this order and each returns a new list:
    1. filter_by_tag        - keep entries relevant to the batch tag
    2. dedupe_entries       - collapse duplicates inside the feed
       dedupe_slugs         - then keep one entry per link
    3. exclude_indexed      - drop entries already in the remote index
    4. exclude_checkpointed - drop entries already recorded for the batch
select_candidates() chains them and applies the processing limit.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from src.index.models import IndexedAssetSummary
from .feed_reader import FeedEntry, derive_slug


TAG_STOPWORDS = frozenset({"the", "and", "for", "ads", "commercial", "commercials"})

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    """
    Canonical form of a title for comparisons.

    Lowercases, removes every character that is not a letter, digit or
    whitespace, collapses whitespace runs to one space and trims. Idempotent.
    """
    text = _NON_ALNUM.sub("", (title or "").lower())
    return _WHITESPACE.sub(" ", text).strip()


def tag_keywords(tag: str) -> list[str]:
    """
    Keywords of a hyphen-delimited batch tag.

    "2026-super-bowl-lx-commercials" -> ["super", "bowl"]: tokens of two
    characters or less, purely numeric tokens and stopwords are dropped.
    """
    return [
        token
        for token in (tag or "").lower().split("-")
        if len(token) > 2 and not token.isdigit() and token not in TAG_STOPWORDS
    ]


def filter_by_tag(entries: list[FeedEntry], tag: str) -> list[FeedEntry]:
    """
    Keep entries whose title or slug mentions enough of the tag's keywords.

    An entry matches when at least min(2, keyword count) keywords appear as
    substrings of its lowercased title or slug. A tag reducing to a single
    keyword needs one hit, and a tag with no keyword at all matches every
    entry; both are intentional so loose campaign names still select items.
    """
    keywords = tag_keywords(tag)
    threshold = min(2, len(keywords))

    matched = []
    for entry in entries:
        title = entry.title.lower()
        slug = entry.slug.lower()
        hits = sum(1 for kw in keywords if kw in title or kw in slug)
        if hits >= threshold:
            matched.append(entry)
    return matched


def dedupe_entries(entries: list[FeedEntry]) -> list[FeedEntry]:
    """
    Collapse entries sharing a normalized title.

    The representative of a group is the entry with the shortest slug (the
    feed appends suffixes such as "...-20262" to reposts); on ties the first
    one wins. It takes the position of the group's first occurrence.
    """
    position: dict[str, int] = {}
    unique: list[FeedEntry] = []

    for entry in entries:
        key = normalize_title(entry.title)
        if key not in position:
            position[key] = len(unique)
            unique.append(entry)
        elif len(entry.slug) < len(unique[position[key]].slug):
            unique[position[key]] = entry
    return unique


def dedupe_slugs(entries: list[FeedEntry]) -> list[FeedEntry]:
    """Keep the first entry per slug. Reposts under a new title share the link."""
    seen: set[str] = set()
    unique: list[FeedEntry] = []
    for entry in entries:
        if entry.slug in seen:
            continue
        seen.add(entry.slug)
        unique.append(entry)
    return unique


@dataclass(frozen=True)
class IndexKeys:
    """Membership sets describing what the remote index already holds."""

    slugs: frozenset = field(default_factory=frozenset)
    titles: frozenset = field(default_factory=frozenset)


def build_index_keys(assets: Iterable[IndexedAssetSummary], base_url: str) -> IndexKeys:
    """Collect source slugs and normalized titles of already indexed assets."""
    slugs = set()
    titles = set()
    for asset in assets:
        if asset.source_url:
            slugs.add(derive_slug(asset.source_url, base_url))
        for title in (asset.title, asset.system_title):
            normalized = normalize_title(title)
            if normalized:
                titles.add(normalized)
    return IndexKeys(slugs=frozenset(slugs), titles=frozenset(titles))


def exclude_indexed(entries: list[FeedEntry], keys: IndexKeys) -> list[FeedEntry]:
    """Drop entries whose slug or normalized title is already in the index."""
    return [
        entry
        for entry in entries
        if not (entry.slug and entry.slug in keys.slugs)
        and normalize_title(entry.title) not in keys.titles
    ]


def exclude_checkpointed(entries: list[FeedEntry], done_slugs: set[str]) -> list[FeedEntry]:
    """Drop entries already recorded (completed or failed) for the batch."""
    return [entry for entry in entries if entry.slug not in done_slugs]


@dataclass
class Selection:
    """Outcome of candidate selection, with counts for the run summary."""

    remaining: list[FeedEntry]
    to_process: list[FeedEntry]
    total: int = 0
    tagged: int = 0
    unique: int = 0
    new: int = 0
    skipped: list[FeedEntry] = field(default_factory=list)


def select_candidates(
    entries: list[FeedEntry],
    tag: str,
    index_keys: IndexKeys,
    done_slugs: set[str],
    limit: Optional[int] = None,
) -> Selection:
    """
    Run every selection pass in order.

    Returns:
        Selection whose ``remaining`` holds all new entries in feed order and
        ``to_process`` the first ``limit`` of them (all when limit is None)
    """
    logger = logging.getLogger("ingest")

    tagged = filter_by_tag(entries, tag)
    unlinked = [entry for entry in tagged if not entry.slug]
    for entry in unlinked:
        # No slug means no dedup key and no checkpoint key
        logger.warning(f"Skipping feed entry without link: '{entry.title}'")
    unique = dedupe_slugs(dedupe_entries([entry for entry in tagged if entry.slug]))
    new = exclude_indexed(unique, index_keys)
    remaining = exclude_checkpointed(new, done_slugs)
    to_process = remaining[:limit] if limit is not None and limit >= 0 else list(remaining)

    logger.info(
        f"Selection for '{tag}': {len(entries)} feed, {len(tagged)} tagged, "
        f"{len(unique)} unique, {len(new)} not indexed, {len(remaining)} remaining"
    )
    return Selection(
        remaining=remaining,
        to_process=to_process,
        total=len(entries),
        tagged=len(tagged),
        unique=len(unique),
        new=len(new),
        skipped=unlinked,
    )
