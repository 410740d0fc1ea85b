"""Tests for the command line interface."""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from newsdash.cli import cli
from newsdash.db import Database
from newsdash.models import Article
from newsdash.scheduler import FetchRunResult


@pytest.fixture
def db_path():
    """Path to a temporary database file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def invoke(runner: CliRunner, db_path: Path, *args: str):
    return runner.invoke(cli, ["--db", str(db_path), *args])


def store_article(db_path: Path, url: str, **kwargs) -> int:
    db = Database(db_path)
    try:
        fields = dict(id=None, title="Stored post", url=url, content="Body", summary="Short summary", source="Feed")
        fields.update(kwargs)
        return db.upsert_article(Article(**fields))
    finally:
        db.close()


class TestSourceCommands:
    """Tests for source management commands."""

    def test_add_without_fetch(self, runner: CliRunner, db_path: Path):
        result = invoke(runner, db_path, "add", "Feed", "https://example.com/feed", "--no-fetch", "-c", "Design")

        assert result.exit_code == 0
        assert "Added source 'Feed'" in result.output

        db = Database(db_path)
        assert db.get_source_by_name("Feed").category == "Design"
        db.close()

    @patch("newsdash.controllers.fetch_source", return_value=[])
    def test_add_fetches_by_default(self, mock_fetch_source, runner: CliRunner, db_path: Path):
        result = invoke(runner, db_path, "add", "Feed", "https://example.com/feed")

        assert result.exit_code == 0
        assert "Fetched 0 article(s)" in result.output
        mock_fetch_source.assert_called_once()

    def test_add_duplicate(self, runner: CliRunner, db_path: Path):
        invoke(runner, db_path, "add", "Feed", "https://example.com/feed", "--no-fetch")

        result = invoke(runner, db_path, "add", "Feed", "https://other.example.com/feed", "--no-fetch")

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_seed_and_list(self, runner: CliRunner, db_path: Path):
        invoke(runner, db_path, "seed")

        result = invoke(runner, db_path, "sources")

        assert result.exit_code == 0
        assert "WP Tavern" in result.output
        assert "Category: Design" in result.output

    def test_deactivate(self, runner: CliRunner, db_path: Path):
        invoke(runner, db_path, "add", "Feed", "https://example.com/feed", "--no-fetch")

        result = invoke(runner, db_path, "deactivate", "Feed")

        assert result.exit_code == 0
        assert "No sources yet" in invoke(runner, db_path, "sources").output
        assert "[inactive]" in invoke(runner, db_path, "sources", "--all").output

    def test_deactivate_unknown(self, runner: CliRunner, db_path: Path):
        result = invoke(runner, db_path, "deactivate", "Missing")

        assert result.exit_code == 1
        assert "not found" in result.output


class TestFetchCommand:
    """Tests for the fetch command."""

    @patch("newsdash.cli.fetch_all")
    def test_fetch_all(self, mock_fetch_all, runner: CliRunner, db_path: Path):
        invoke(runner, db_path, "add", "Feed", "https://example.com/feed", "--no-fetch")
        mock_fetch_all.return_value = FetchRunResult(articles=[object(), object()], sources_fetched=1, duration=1.5)

        result = invoke(runner, db_path, "fetch", "--delay", "0")

        assert result.exit_code == 0
        assert "Fetched 2 article(s) in 1.5s" in result.output
        assert mock_fetch_all.call_args.kwargs["delay"] == 0

    @patch("newsdash.cli.fetch_all")
    def test_fetch_all_failure(self, mock_fetch_all, runner: CliRunner, db_path: Path):
        invoke(runner, db_path, "add", "Feed", "https://example.com/feed", "--no-fetch")
        mock_fetch_all.return_value = FetchRunResult(error="database is locked")

        result = invoke(runner, db_path, "fetch")

        assert result.exit_code == 1
        assert "database is locked" in result.output

    def test_fetch_without_sources(self, runner: CliRunner, db_path: Path):
        result = invoke(runner, db_path, "fetch")

        assert result.exit_code == 0
        assert "No active sources" in result.output

    def test_fetch_unknown_source(self, runner: CliRunner, db_path: Path):
        result = invoke(runner, db_path, "fetch", "Missing")

        assert result.exit_code == 1


class TestArticleCommands:
    """Tests for article listing and state commands."""

    def test_articles_lists_summary(self, runner: CliRunner, db_path: Path):
        store_article(db_path, "https://example.com/1", read_time=4)

        result = invoke(runner, db_path, "articles")

        assert result.exit_code == 0
        assert "Stored post" in result.output
        assert "Short summary" in result.output
        assert "4 min read" in result.output

    def test_articles_empty(self, runner: CliRunner, db_path: Path):
        result = invoke(runner, db_path, "articles", "--unread")

        assert "No articles found." in result.output

    def test_read_and_unread(self, runner: CliRunner, db_path: Path):
        article_id = store_article(db_path, "https://example.com/1")

        assert "Marked article" in invoke(runner, db_path, "read", str(article_id)).output
        assert "already marked as read" in invoke(runner, db_path, "read", str(article_id)).output
        assert "as unread" in invoke(runner, db_path, "unread", str(article_id)).output

    def test_save_toggles(self, runner: CliRunner, db_path: Path):
        article_id = store_article(db_path, "https://example.com/1")

        assert "Saved article" in invoke(runner, db_path, "save", str(article_id)).output
        assert "Unsaved article" in invoke(runner, db_path, "save", str(article_id)).output

    def test_missing_article(self, runner: CliRunner, db_path: Path):
        result = invoke(runner, db_path, "read", "42")

        assert result.exit_code == 1
        assert "Article 42 not found" in result.output

    def test_stats(self, runner: CliRunner, db_path: Path):
        store_article(db_path, "https://example.com/1")

        result = invoke(runner, db_path, "stats")

        assert "Total: 1 | Unread: 1 | Saved: 0" in result.output

    def test_score(self, runner: CliRunner, db_path: Path):
        store_article(db_path, "https://example.com/1", title="WordPress release")

        result = invoke(runner, db_path, "score")

        assert result.exit_code == 0
        assert "WordPress release" in result.output


class TestFeedCommand:
    """Tests for the feed-command command."""

    @patch("newsdash.controllers.fetch_source", return_value=[])
    def test_adds_feed(self, mock_fetch_source, runner: CliRunner, db_path: Path):
        result = invoke(runner, db_path, "feed-command", "add feed https://example.com/rss Example")

        assert result.exit_code == 0
        assert 'Feed "Example" added successfully' in result.output

    def test_site_name_only(self, runner: CliRunner, db_path: Path):
        result = invoke(runner, db_path, "feed-command", "subscribe to Example's feed")

        assert result.exit_code == 1
        assert "actual RSS feed URL" in result.output

    def test_no_command(self, runner: CliRunner, db_path: Path):
        result = invoke(runner, db_path, "feed-command", "hello")

        assert "No feed command detected." in result.output
