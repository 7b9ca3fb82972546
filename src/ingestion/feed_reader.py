"""
RSS feed reader for the ad ingest pipeline.

Fetches the adland.tv syndication feed and turns every <item> into a
FeedEntry, in feed order. Network and parse failures raise FetchError; a
valid feed without items returns an empty list so callers can tell the two
apart.

Usage:
    reader = FeedReader(config)
    entries = reader.fetch_entries()
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests
from bs4 import BeautifulSoup

from src.config import IngestConfig
from src.errors import FetchError
from src.logger import log_function


# Escapes that survive inside CDATA sections of the feed
ENTITY_REPLACEMENTS = (
    ("&apos;", "'"),
    ("&quot;", '"'),
    ("&amp;", "&"),
)


@dataclass(frozen=True)
class FeedEntry:
    """One candidate advertisement parsed from the feed."""

    title: str
    link: str
    slug: str
    description: str = ""
    published_at: str = ""
    author: str = ""
    media_url: Optional[str] = None


def unescape_entities(text: str) -> str:
    """Replace the fixed set of HTML entity escapes found in feed text."""
    for entity, char in ENTITY_REPLACEMENTS:
        text = text.replace(entity, char)
    return text


def derive_slug(link: str, base_url: str) -> str:
    """Strip the feed's base URL from a link: https://adland.tv/foo-bar -> foo-bar"""
    if base_url and link.startswith(base_url):
        return link[len(base_url):]
    return link


def _child_text(item, *names: str) -> str:
    for name in names:
        tag = item.find(name)
        if tag is not None:
            return tag.get_text(strip=True)
    return ""


def parse_feed(content: bytes, base_url: str) -> list[FeedEntry]:
    """
    Parse an RSS document into feed entries.

    Args:
        content: Raw XML document
        base_url: Prefix removed from each link to build the slug

    Returns:
        Entries in document order

    Raises:
        FetchError: If the document is not an RSS feed
    """
    logger = logging.getLogger("feed_reader")

    soup = BeautifulSoup(content, "xml")
    if soup.find("rss") is None and soup.find("channel") is None:
        raise FetchError("feed", "document is not an RSS feed")

    entries = []
    for position, item in enumerate(soup.find_all("item"), 1):
        title = unescape_entities(_child_text(item, "title"))
        link = _child_text(item, "link")
        if not title or not link:
            logger.warning(
                f"Feed item #{position} is missing its "
                f"{'title' if not title else 'link'}; kept with an empty value"
            )

        media_url = None
        enclosure = item.find("enclosure")
        if (
            enclosure is not None
            and enclosure.has_attr("url")
            and str(enclosure.get("type", "")).startswith("video/")
        ):
            media_url = enclosure["url"]

        entries.append(
            FeedEntry(
                title=title,
                link=link,
                slug=derive_slug(link, base_url),
                description=unescape_entities(_child_text(item, "description")),
                published_at=_child_text(item, "pubDate"),
                author=_child_text(item, "author", "creator"),
                media_url=media_url,
            )
        )
    return entries


class FeedReader:
    """Fetches and parses the configured syndication feed."""

    def __init__(self, config: IngestConfig, session: Optional[requests.Session] = None):
        self.feed_url = config.feed_url
        self.base_url = config.feed_base_url
        self.timeout = config.feed_timeout
        self.session = session or requests.Session()
        self.logger = logging.getLogger("feed_reader")

    @log_function(logger_name="feed_reader", log_execution_time=True)
    def fetch_entries(self) -> list[FeedEntry]:
        """
        Fetch the feed and return its entries in feed order.

        Raises:
            FetchError: If the feed is unreachable, returns an error status or
                cannot be parsed
        """
        self.logger.info(f"Fetching feed from {self.feed_url}...")
        try:
            response = self.session.get(self.feed_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(f"Error fetching feed: {e}")
            raise FetchError(self.feed_url, str(e)) from e

        entries = parse_feed(response.content, self.base_url)
        self.logger.info(f"Parsed {len(entries)} feed entries")
        return entries
