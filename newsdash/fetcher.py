"""Per-source ingestion: feed items to stored articles."""

import logging
import re
import sqlite3
from datetime import datetime
from typing import Optional

from .db import Database
from .extractor import extract_content
from .feeds import FeedItem, FeedParseError, parse_feed
from .models import Article, Source
from .text import estimate_read_time, summarize

logger = logging.getLogger(__name__)

MAX_ITEMS_PER_SOURCE = 10
MIN_CONTENT_LENGTH = 100

_WHITESPACE_RE = re.compile(r"\s+")


def fetch_source(db: Database, source: Source, max_items: int = MAX_ITEMS_PER_SOURCE) -> list[Article]:
    """Fetch a source's feed and store its latest articles.

    Only the first ``max_items`` feed items are considered. Each item's page
    is extracted, summarized and upserted by URL; items with too little text
    are skipped. A broken item never stops the batch, and a broken feed
    yields no articles without touching ``last_fetched``.

    Args:
        db: Database instance
        source: Source to fetch

    Returns:
        Articles stored during this fetch
    """
    logger.info("Fetching %s...", source.name)

    try:
        items = parse_feed(source.url)
    except FeedParseError as e:
        logger.error("Error fetching %s: %s", source.name, e)
        return []

    articles = []
    for item in items[:max_items]:
        try:
            article = _build_article(source, item)
            if article is None:
                continue
            db.upsert_article(article)
            articles.append(article)
        except Exception:
            logger.exception("Error processing article %s from %s", item.link, source.name)

    try:
        db.update_source_last_fetched(source.id, datetime.now())
    except sqlite3.Error as e:
        logger.error("Error updating last fetched time for %s: %s", source.name, e)

    logger.info("%s: %d articles processed", source.name, len(articles))
    return articles


def fetch_source_by_name(db: Database, name: str) -> Optional[list[Article]]:
    """Fetch a specific source by name.

    Returns:
        Stored articles if the source was found, None otherwise
    """
    source = db.get_source_by_name(name)
    if not source:
        return None

    return fetch_source(db, source)


def _build_article(source: Source, item: FeedItem) -> Optional[Article]:
    """Turn a feed item into an Article, or None if its page has too little text."""
    content = extract_content(item.link)
    if len(content) <= MIN_CONTENT_LENGTH:
        logger.debug("Skipping %s: only %d characters of content", item.link, len(content))
        return None

    return Article(
        id=None,
        title=_normalize_title(item.title),
        url=item.link,
        content=content,
        summary=summarize(content),
        source=source.name,
        author=item.author or None,
        published_date=item.published_date or datetime.now(),
        read_time=estimate_read_time(content),
    )


def _normalize_title(title: Optional[str]) -> str:
    title = _WHITESPACE_RE.sub(" ", title or "").strip()
    return title or "Untitled"
