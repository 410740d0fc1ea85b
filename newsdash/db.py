"""SQLite database operations for newsdash."""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional

from .models import Article, Source

DEFAULT_DB_PATH = Path.home() / ".newsdash" / "newsdash.db"
DEFAULT_ARTICLE_LIMIT = 50


class Database:
    """SQLite database interface for newsdash."""

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize database connection and schema.

        A constructed Database is ready for use; ``is_ready`` stays True
        until ``close`` is called.

        Args:
            db_path: Path to the SQLite database file. Defaults to ~/.newsdash/newsdash.db
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: Optional[sqlite3.Connection] = None
        self._ready = False
        self._init_db()

    @property
    def is_ready(self) -> bool:
        """True once the schema exists and the connection is open."""
        return self._ready

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            # The scheduler thread shares this connection; runs are serialized.
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        conn = self._get_conn()
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS sources (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                url TEXT NOT NULL UNIQUE,
                category TEXT,
                active BOOLEAN DEFAULT TRUE,
                last_fetched TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS articles (
                id INTEGER PRIMARY KEY,
                title TEXT NOT NULL,
                url TEXT NOT NULL UNIQUE,
                content TEXT,
                summary TEXT,
                source TEXT NOT NULL,
                author TEXT,
                published_date TIMESTAMP,
                read_time INTEGER DEFAULT 0,
                is_read BOOLEAN DEFAULT FALSE,
                is_saved BOOLEAN DEFAULT FALSE,
                score INTEGER DEFAULT 0,
                created_at TIMESTAMP,
                updated_at TIMESTAMP
            );
        """)
        conn.commit()
        self._ready = True

    def close(self) -> None:
        """Close database connection."""
        self._ready = False
        if self._conn:
            self._conn.close()
            self._conn = None

    # Source operations

    def add_source(self, source: Source) -> Source:
        """Add a new feed source.

        Args:
            source: Source object to add (id will be ignored)

        Returns:
            Source object with assigned id

        Raises:
            sqlite3.IntegrityError: If a source with the same URL exists
        """
        conn = self._get_conn()
        cursor = conn.execute(
            """
            INSERT INTO sources (name, url, category, active, last_fetched)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                source.name,
                source.url,
                source.category,
                source.active,
                _format_datetime(source.last_fetched),
            ),
        )
        conn.commit()
        source.id = cursor.lastrowid
        return source

    def add_source_if_missing(self, source: Source) -> bool:
        """Insert a source unless its URL is already known.

        Returns:
            True if the source was inserted, False if it already existed
        """
        conn = self._get_conn()
        cursor = conn.execute(
            "INSERT OR IGNORE INTO sources (name, url, category, active) VALUES (?, ?, ?, ?)",
            (source.name, source.url, source.category, source.active),
        )
        conn.commit()
        if cursor.rowcount > 0:
            source.id = cursor.lastrowid
            return True
        return False

    def get_source(self, source_id: int) -> Optional[Source]:
        """Get a source by id."""
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM sources WHERE id = ?", (source_id,)).fetchone()
        return self._row_to_source(row) if row else None

    def get_source_by_name(self, name: str) -> Optional[Source]:
        """Get a source by name."""
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM sources WHERE name = ?", (name,)).fetchone()
        return self._row_to_source(row) if row else None

    def get_source_by_url(self, url: str) -> Optional[Source]:
        """Get a source by feed URL."""
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM sources WHERE url = ?", (url,)).fetchone()
        return self._row_to_source(row) if row else None

    def list_sources(self, active_only: bool = False) -> list[Source]:
        """List sources in insertion order.

        Args:
            active_only: If True, skip deactivated sources

        Returns:
            List of Source objects
        """
        conn = self._get_conn()
        query = "SELECT * FROM sources"
        if active_only:
            query += " WHERE active = 1"
        query += " ORDER BY id"
        rows = conn.execute(query).fetchall()
        return [self._row_to_source(row) for row in rows]

    def set_source_active(self, source_id: int, active: bool) -> bool:
        """Activate or deactivate a source.

        Returns:
            True if the source was updated, False if not found
        """
        conn = self._get_conn()
        cursor = conn.execute(
            "UPDATE sources SET active = ? WHERE id = ?",
            (active, source_id),
        )
        conn.commit()
        return cursor.rowcount > 0

    def update_source_last_fetched(self, source_id: int, last_fetched: datetime) -> None:
        """Update the last_fetched timestamp for a source."""
        conn = self._get_conn()
        conn.execute(
            "UPDATE sources SET last_fetched = ? WHERE id = ?",
            (_format_datetime(last_fetched), source_id),
        )
        conn.commit()

    def _row_to_source(self, row: sqlite3.Row) -> Source:
        """Convert a database row to a Source object."""
        return Source(
            id=row["id"],
            name=row["name"],
            url=row["url"],
            category=row["category"] or "Other",
            active=bool(row["active"]),
            last_fetched=self._parse_datetime(row["last_fetched"]),
        )

    # Article operations

    def upsert_article(self, article: Article) -> int:
        """Insert an article, or replace the stored one with the same URL.

        Content fields are overwritten; id, read/saved flags and score of an
        existing row are kept.

        Args:
            article: Article to store

        Returns:
            The id of the stored row (also assigned to ``article.id``)
        """
        conn = self._get_conn()
        now = _format_datetime(datetime.now())
        conn.execute(
            """
            INSERT INTO articles (
                title, url, content, summary, source, author,
                published_date, read_time, is_read, is_saved, score,
                created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(url) DO UPDATE SET
                title = excluded.title,
                content = excluded.content,
                summary = excluded.summary,
                source = excluded.source,
                author = excluded.author,
                published_date = excluded.published_date,
                read_time = excluded.read_time,
                updated_at = excluded.updated_at
            """,
            (
                article.title,
                article.url,
                article.content,
                article.summary,
                article.source,
                article.author,
                _format_datetime(article.published_date),
                article.read_time,
                article.is_read,
                article.is_saved,
                article.score,
                now,
                now,
            ),
        )
        conn.commit()
        row = conn.execute("SELECT id FROM articles WHERE url = ?", (article.url,)).fetchone()
        article.id = row["id"]
        return article.id

    def get_article(self, article_id: int) -> Optional[Article]:
        """Get an article by id."""
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM articles WHERE id = ?", (article_id,)).fetchone()
        return self._row_to_article(row) if row else None

    def get_article_by_url(self, url: str) -> Optional[Article]:
        """Get an article by URL."""
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM articles WHERE url = ?", (url,)).fetchone()
        return self._row_to_article(row) if row else None

    def list_articles(
        self,
        unread_only: bool = False,
        saved_only: bool = False,
        category: Optional[str] = None,
        source_name: Optional[str] = None,
        limit: Optional[int] = DEFAULT_ARTICLE_LIMIT,
    ) -> list[Article]:
        """List articles, newest publish date first.

        Args:
            unread_only: If True, only return unread articles
            saved_only: If True, only return saved articles
            category: If provided, only articles whose source has this category
            source_name: If provided, only articles from this source
            limit: Maximum number of rows, or None for no limit

        Returns:
            List of Article objects
        """
        conn = self._get_conn()
        query = "SELECT * FROM articles WHERE 1=1"
        params: list = []

        if unread_only:
            query += " AND is_read = 0"
        if saved_only:
            query += " AND is_saved = 1"
        if category is not None:
            query += " AND source IN (SELECT name FROM sources WHERE category = ?)"
            params.append(category)
        if source_name is not None:
            query += " AND source = ?"
            params.append(source_name)

        query += " ORDER BY published_date DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        rows = conn.execute(query, params).fetchall()
        return [self._row_to_article(row) for row in rows]

    def count_articles(self, unread_only: bool = False, saved_only: bool = False) -> int:
        """Count stored articles with optional read/saved filters."""
        conn = self._get_conn()
        query = "SELECT COUNT(*) FROM articles WHERE 1=1"
        if unread_only:
            query += " AND is_read = 0"
        if saved_only:
            query += " AND is_saved = 1"
        return conn.execute(query).fetchone()[0]

    def set_article_read(self, article_id: int, is_read: bool = True) -> bool:
        """Mark an article as read or unread.

        Returns:
            True if article was updated, False if not found
        """
        conn = self._get_conn()
        cursor = conn.execute(
            "UPDATE articles SET is_read = ? WHERE id = ?",
            (is_read, article_id),
        )
        conn.commit()
        return cursor.rowcount > 0

    def toggle_article_saved(self, article_id: int) -> bool:
        """Flip the saved flag of an article.

        Returns:
            True if article was updated, False if not found
        """
        conn = self._get_conn()
        cursor = conn.execute(
            "UPDATE articles SET is_saved = NOT is_saved WHERE id = ?",
            (article_id,),
        )
        conn.commit()
        return cursor.rowcount > 0

    def update_article_score(self, article_id: int, score: int) -> None:
        conn = self._get_conn()
        conn.execute("UPDATE articles SET score = ? WHERE id = ?", (score, article_id))
        conn.commit()

    def _row_to_article(self, row: sqlite3.Row) -> Article:
        """Convert a database row to an Article object."""
        return Article(
            id=row["id"],
            title=row["title"],
            url=row["url"],
            content=row["content"] or "",
            summary=row["summary"],
            source=row["source"],
            author=row["author"],
            published_date=self._parse_datetime(row["published_date"]),
            read_time=row["read_time"] or 0,
            is_read=bool(row["is_read"]),
            is_saved=bool(row["is_saved"]),
            score=row["score"] or 0,
            created_at=self._parse_datetime(row["created_at"]),
            updated_at=self._parse_datetime(row["updated_at"]),
        )

    @staticmethod
    def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
        """Parse a datetime string from the database."""
        if value is None:
            return None
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError):
            return None


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime for storage."""
    return value.isoformat() if value else None
