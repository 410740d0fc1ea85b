"""RSS/Atom feed parsing for newsdash."""

from calendar import timegm
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import feedparser
import requests

from .extractor import FETCH_TIMEOUT, USER_AGENT

MAX_REDIRECTS = 5


@dataclass
class FeedItem:
    """Represents one entry of a fetched feed, before normalization."""

    title: Optional[str]
    link: str
    published_date: Optional[datetime] = None
    author: Optional[str] = None
    summary: Optional[str] = None


def parse_feed(
    feed_url: str, timeout: int = FETCH_TIMEOUT, max_redirects: int = MAX_REDIRECTS
) -> list[FeedItem]:
    """Download and parse an RSS/Atom feed.

    Args:
        feed_url: URL of the RSS/Atom feed
        timeout: Request timeout in seconds
        max_redirects: Maximum number of redirects to follow

    Returns:
        List of FeedItem objects in feed order

    Raises:
        FeedParseError: If the feed cannot be fetched or parsed
    """
    try:
        with requests.Session() as session:
            session.max_redirects = max_redirects
            session.headers["User-Agent"] = USER_AGENT
            response = session.get(feed_url, timeout=timeout)
            response.raise_for_status()
    except requests.RequestException as e:
        raise FeedParseError(f"Failed to fetch feed: {e}") from e

    feed = feedparser.parse(response.content)

    if feed.bozo and not feed.entries:
        raise FeedParseError(f"Failed to parse feed: {feed.bozo_exception}")

    items = []
    for entry in feed.entries:
        link = entry.get("link", "").strip()
        if not link:
            continue

        items.append(
            FeedItem(
                title=entry.get("title"),
                link=link,
                published_date=_parse_entry_date(entry),
                author=_parse_entry_author(entry),
                summary=entry.get("summary"),
            )
        )

    return items


def _parse_entry_date(entry: dict) -> Optional[datetime]:
    """Parse publication date from a feed entry.

    Args:
        entry: feedparser entry dict

    Returns:
        datetime if a date was found and parsed, None otherwise
    """
    # feedparser normalizes dates to *_parsed tuples in UTC
    date_fields = ["published_parsed", "updated_parsed", "created_parsed"]

    for field in date_fields:
        parsed_time = entry.get(field)
        if parsed_time:
            try:
                return datetime.fromtimestamp(timegm(parsed_time))
            except (ValueError, OverflowError, OSError):
                continue

    return None


def _parse_entry_author(entry: dict) -> Optional[str]:
    """Return the entry's creator or author, if any."""
    # feedparser maps <dc:creator> onto "author"
    author = (entry.get("author") or "").strip()
    return author or None


class FeedParseError(Exception):
    """Raised when a feed cannot be fetched or parsed."""

    pass
