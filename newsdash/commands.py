"""Free-text "add feed" commands, as typed into a chat."""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from .controllers import add_source
from .db import Database
from .models import Article, Source

_QUOTES = "\"'“”"

# Tried in order; group 1 is the URL (or a site name), group 2 an optional name.
COMMAND_PATTERNS = [
    re.compile(
        r"add (?:this )?rss feed:?\s*(https?://\S+)"
        rf"(?:\s+(?:named?|called?)\s+[{_QUOTES}]?([^{_QUOTES}]+)[{_QUOTES}]?)?",
        re.IGNORECASE,
    ),
    re.compile(r"add feed\s+(https?://\S+)\s*(.+)?", re.IGNORECASE),
    re.compile(r"(?:subscribe to|add)\s+(.+?)(?:'s)?\s+(?:rss\s+)?(?:feed|blog)", re.IGNORECASE),
]

CATEGORY_HINTS = [
    ("WordPress", ("wordpress", "wp")),
    ("Design", ("css", "design", "ux", "ui")),
    ("Development", ("dev", "tech", "code", "github")),
]


@dataclass
class FeedCommand:
    """A parsed request to add a feed."""

    url: str
    name: str
    category: str


class FeedCommandError(Exception):
    """Raised when a message asks for a feed but gives no usable URL."""

    pass


def parse_feed_command(message: str) -> Optional[FeedCommand]:
    """Parse a chat message that asks to add a feed.

    Args:
        message: Free-text message

    Returns:
        FeedCommand, or None if the message is not a feed command

    Raises:
        FeedCommandError: If the message names a site instead of a feed URL
    """
    for pattern in COMMAND_PATTERNS:
        match = pattern.search(message)
        if not match:
            continue

        url = match.group(1).strip()
        if not url.startswith("http"):
            raise FeedCommandError(
                f'I found "{url}" but need the actual RSS feed URL. '
                'Try: "Add RSS feed: https://example.com/feed" instead.'
            )

        name = match.group(2) if pattern.groups >= 2 else None
        name = name.strip().strip(_QUOTES).strip() if name else ""
        if not name:
            name = _name_from_url(url)

        return FeedCommand(url=url, name=name, category=guess_category(name, url))

    return None


def guess_category(name: str, url: str) -> str:
    """Guess a source category from keywords in its name and URL."""
    haystack = f"{name} {url}".lower()
    for category, hints in CATEGORY_HINTS:
        if any(hint in haystack for hint in hints):
            return category
    return "Other"


def add_feed_from_command(db: Database, message: str) -> Optional[tuple[Source, list[Article]]]:
    """Parse a chat message and add the feed it names, fetching it once.

    Returns:
        Tuple of (created Source, initial articles), or None if the message
        is not a feed command

    Raises:
        FeedCommandError: If the message names a site instead of a feed URL
        SourceAlreadyExistsError: If the feed is already tracked
    """
    command = parse_feed_command(message)
    if command is None:
        return None

    return add_source(db, command.name, command.url, command.category, fetch=True)


def _name_from_url(url: str) -> str:
    host = urlparse(url).hostname
    if not host:
        return "New Feed"
    return host.replace("www.", "", 1)
