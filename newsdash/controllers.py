"""Business logic controllers for newsdash."""

import logging
from typing import Optional

from .db import DEFAULT_ARTICLE_LIMIT, Database
from .fetcher import fetch_source
from .models import Article, Source
from .text import score_article

logger = logging.getLogger(__name__)

DEFAULT_SOURCES = [
    Source(id=None, name="WordPress.org News", url="https://wordpress.org/news/feed/", category="WordPress"),
    Source(id=None, name="WP Tavern", url="https://wptavern.com/feed", category="WordPress"),
    Source(id=None, name="CSS-Tricks", url="https://css-tricks.com/feed/", category="Design"),
    Source(id=None, name="Smashing Magazine", url="https://www.smashingmagazine.com/feed/", category="Design"),
    Source(id=None, name="A List Apart", url="https://alistapart.com/main/feed/", category="Design"),
    Source(id=None, name="GitHub Blog", url="https://github.blog/feed/", category="Development"),
]


class SourceNotFoundError(Exception):
    """Raised when a source is not found."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Source '{name}' not found")


class SourceAlreadyExistsError(Exception):
    """Raised when trying to add a source that already exists."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Source with {field} '{value}' already exists")


class ArticleNotFoundError(Exception):
    """Raised when an article is not found."""

    def __init__(self, article_id: int):
        self.article_id = article_id
        super().__init__(f"Article {article_id} not found")


def add_source(
    db: Database,
    name: str,
    url: str,
    category: str = "Other",
    fetch: bool = False,
) -> tuple[Source, list[Article]]:
    """Add a new feed source, optionally fetching it right away.

    Args:
        db: Database instance
        name: Source name
        url: Feed URL
        category: Category used for filtering articles
        fetch: If True, fetch the new source once

    Returns:
        Tuple of (created Source, articles stored by the initial fetch)

    Raises:
        SourceAlreadyExistsError: If a source with the same name or URL exists
    """
    if db.get_source_by_name(name):
        raise SourceAlreadyExistsError("name", name)

    if db.get_source_by_url(url):
        raise SourceAlreadyExistsError("URL", url)

    source = db.add_source(Source(id=None, name=name, url=url, category=category or "Other"))

    articles: list[Article] = []
    if fetch:
        articles = fetch_source(db, source)
        logger.info("Fetched %d initial articles from %s", len(articles), name)

    return source, articles


def seed_default_sources(db: Database) -> list[Source]:
    """Insert the default sources that are not already present.

    A default is skipped when a source with the same name or URL exists.

    Returns:
        The sources that were added
    """
    added = []
    for default in DEFAULT_SOURCES:
        if db.get_source_by_name(default.name):
            continue
        source = Source(id=None, name=default.name, url=default.url, category=default.category)
        if db.add_source_if_missing(source):
            added.append(source)
    return added


def set_source_active(db: Database, name: str, active: bool) -> Source:
    """Deactivate or reactivate a source by name.

    Raises:
        SourceNotFoundError: If source not found
    """
    source = db.get_source_by_name(name)
    if not source:
        raise SourceNotFoundError(name)

    if source.active != active:
        db.set_source_active(source.id, active)
        source.active = active

    return source


def get_articles(
    db: Database,
    unread_only: bool = False,
    saved_only: bool = False,
    category: Optional[str] = None,
    source_name: Optional[str] = None,
    limit: Optional[int] = DEFAULT_ARTICLE_LIMIT,
) -> list[Article]:
    """Get articles with optional filters.

    Raises:
        SourceNotFoundError: If source_name provided but not found
    """
    if source_name and not db.get_source_by_name(source_name):
        raise SourceNotFoundError(source_name)

    return db.list_articles(
        unread_only=unread_only,
        saved_only=saved_only,
        category=category,
        source_name=source_name,
        limit=limit,
    )


def _get_article_or_raise(db: Database, article_id: int) -> Article:
    article = db.get_article(article_id)
    if not article:
        raise ArticleNotFoundError(article_id)
    return article


def mark_article_read(db: Database, article_id: int) -> Article:
    """Mark an article as read.

    Returns:
        The article (before marking)

    Raises:
        ArticleNotFoundError: If article not found
    """
    article = _get_article_or_raise(db, article_id)

    if not article.is_read:
        db.set_article_read(article_id, True)

    return article


def mark_article_unread(db: Database, article_id: int) -> Article:
    """Mark an article as unread.

    Returns:
        The article (before marking)

    Raises:
        ArticleNotFoundError: If article not found
    """
    article = _get_article_or_raise(db, article_id)

    if article.is_read:
        db.set_article_read(article_id, False)

    return article


def toggle_article_saved(db: Database, article_id: int) -> Article:
    """Flip an article's saved flag.

    Returns:
        The article after the change

    Raises:
        ArticleNotFoundError: If article not found
    """
    _get_article_or_raise(db, article_id)
    db.toggle_article_saved(article_id)
    return db.get_article(article_id)


def get_stats(db: Database) -> dict[str, int]:
    """Count total, unread and saved articles."""
    return {
        "total": db.count_articles(),
        "unread": db.count_articles(unread_only=True),
        "saved": db.count_articles(saved_only=True),
    }


def rescore_articles(db: Database) -> list[Article]:
    """Compute and store the relevance score of every article.

    Returns:
        All articles, highest score first
    """
    articles = db.list_articles(limit=None)
    for article in articles:
        article.score = score_article(article)
        db.update_article_score(article.id, article.score)

    return sorted(articles, key=lambda a: a.score, reverse=True)
