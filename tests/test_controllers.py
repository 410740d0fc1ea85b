"""Tests for controllers."""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from newsdash.controllers import (
    DEFAULT_SOURCES,
    ArticleNotFoundError,
    SourceAlreadyExistsError,
    SourceNotFoundError,
    add_source,
    get_articles,
    get_stats,
    mark_article_read,
    mark_article_unread,
    rescore_articles,
    seed_default_sources,
    set_source_active,
    toggle_article_saved,
)
from newsdash.db import Database
from newsdash.models import Article


@pytest.fixture
def db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        database = Database(db_path)
        yield database
        database.close()


def store_article(db: Database, url: str, **kwargs) -> int:
    fields = dict(id=None, title="Title", url=url, content="Body", summary=None, source="Test Feed")
    fields.update(kwargs)
    return db.upsert_article(Article(**fields))


class TestAddSource:
    """Tests for add_source controller."""

    def test_add_source_success(self, db: Database):
        source, articles = add_source(db, "Test Feed", "https://example.com/feed", "Design")

        assert source.id is not None
        assert source.category == "Design"
        assert articles == []

    def test_add_source_default_category(self, db: Database):
        source, _ = add_source(db, "Test Feed", "https://example.com/feed")
        assert db.get_source(source.id).category == "Other"

    @patch("newsdash.controllers.fetch_source")
    def test_add_source_with_initial_fetch(self, mock_fetch_source, db: Database):
        """Test that the new source is fetched once when requested."""
        mock_fetch_source.return_value = ["article"]

        source, articles = add_source(db, "Test Feed", "https://example.com/feed", fetch=True)

        mock_fetch_source.assert_called_once_with(db, source)
        assert articles == ["article"]

    def test_add_source_duplicate_name(self, db: Database):
        add_source(db, "Test Feed", "https://example.com/feed")

        with pytest.raises(SourceAlreadyExistsError) as exc_info:
            add_source(db, "Test Feed", "https://other.example.com/feed")

        assert exc_info.value.field == "name"

    def test_add_source_duplicate_url(self, db: Database):
        add_source(db, "Test Feed", "https://example.com/feed")

        with pytest.raises(SourceAlreadyExistsError) as exc_info:
            add_source(db, "Other Feed", "https://example.com/feed")

        assert exc_info.value.field == "URL"


class TestSeedDefaultSources:
    """Tests for seed_default_sources controller."""

    def test_seed_adds_all_defaults(self, db: Database):
        added = seed_default_sources(db)

        assert len(added) == len(DEFAULT_SOURCES)
        categories = {s.category for s in db.list_sources()}
        assert categories == {"WordPress", "Design", "Development"}

    def test_seed_is_idempotent(self, db: Database):
        seed_default_sources(db)

        assert seed_default_sources(db) == []
        assert len(db.list_sources()) == len(DEFAULT_SOURCES)

    def test_seed_skips_existing_name(self, db: Database):
        """Test that a default is not added twice when its name is taken at another URL."""
        add_source(db, "WP Tavern", "https://mirror.example.com/wptavern.xml")

        added = seed_default_sources(db)

        assert "WP Tavern" not in [s.name for s in added]
        assert [s.name for s in db.list_sources()].count("WP Tavern") == 1
        assert db.get_source_by_name("WP Tavern").url == "https://mirror.example.com/wptavern.xml"


class TestSetSourceActive:
    """Tests for set_source_active controller."""

    def test_deactivate_and_reactivate(self, db: Database):
        add_source(db, "Test Feed", "https://example.com/feed")

        set_source_active(db, "Test Feed", False)
        assert db.list_sources(active_only=True) == []

        set_source_active(db, "Test Feed", True)
        assert len(db.list_sources(active_only=True)) == 1

    def test_unknown_source(self, db: Database):
        with pytest.raises(SourceNotFoundError):
            set_source_active(db, "Missing", False)


class TestGetArticles:
    """Tests for get_articles controller."""

    def test_filters_by_category(self, db: Database):
        add_source(db, "Design Feed", "https://d.example.com/feed", "Design")
        add_source(db, "Dev Feed", "https://v.example.com/feed", "Development")
        store_article(db, "https://example.com/1", source="Design Feed")
        store_article(db, "https://example.com/2", source="Dev Feed")

        articles = get_articles(db, category="Development")

        assert [a.url for a in articles] == ["https://example.com/2"]

    def test_unknown_source_name(self, db: Database):
        with pytest.raises(SourceNotFoundError):
            get_articles(db, source_name="Missing")

    def test_unread_and_saved(self, db: Database):
        first = store_article(db, "https://example.com/1")
        store_article(db, "https://example.com/2")
        mark_article_read(db, first)
        toggle_article_saved(db, first)

        assert [a.id for a in get_articles(db, saved_only=True)] == [first]
        assert first not in [a.id for a in get_articles(db, unread_only=True)]


class TestArticleState:
    """Tests for read/saved controllers."""

    def test_mark_read(self, db: Database):
        article_id = store_article(db, "https://example.com/1")

        before = mark_article_read(db, article_id)

        assert before.is_read is False
        assert db.get_article(article_id).is_read is True

    def test_mark_unread(self, db: Database):
        article_id = store_article(db, "https://example.com/1")
        mark_article_read(db, article_id)

        before = mark_article_unread(db, article_id)

        assert before.is_read is True
        assert db.get_article(article_id).is_read is False

    def test_toggle_saved(self, db: Database):
        article_id = store_article(db, "https://example.com/1")

        assert toggle_article_saved(db, article_id).is_saved is True
        assert toggle_article_saved(db, article_id).is_saved is False

    def test_missing_article(self, db: Database):
        with pytest.raises(ArticleNotFoundError):
            mark_article_read(db, 999)
        with pytest.raises(ArticleNotFoundError):
            mark_article_unread(db, 999)
        with pytest.raises(ArticleNotFoundError):
            toggle_article_saved(db, 999)


class TestStatsAndScores:
    """Tests for get_stats and rescore_articles."""

    def test_stats(self, db: Database):
        first = store_article(db, "https://example.com/1")
        store_article(db, "https://example.com/2")
        mark_article_read(db, first)

        assert get_stats(db) == {"total": 2, "unread": 1, "saved": 0}

    def test_rescore_orders_and_stores(self, db: Database):
        low = store_article(db, "https://example.com/1", title="Gardening", content="Tomatoes")
        high = store_article(db, "https://example.com/2", title="WordPress", content="css tips")

        ranked = rescore_articles(db)

        assert [a.id for a in ranked] == [high, low]
        assert db.get_article(high).score == 5
        assert db.get_article(low).score == 0
