"""Sequential fetch runs over all active sources, and the periodic scheduler."""

import logging
import sqlite3
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from .db import Database
from .fetcher import fetch_source
from .models import Article

logger = logging.getLogger(__name__)

SOURCE_DELAY = 1.0
DEFAULT_FETCH_INTERVAL = 4 * 60 * 60
DEFAULT_STARTUP_DELAY = 5.0


@dataclass
class FetchRunResult:
    """Result of one pass over all active sources."""

    articles: list[Article] = field(default_factory=list)
    sources_fetched: int = 0
    duration: float = 0.0
    error: Optional[str] = None
    skipped: bool = False

    @property
    def new_articles(self) -> int:
        return len(self.articles)


def fetch_all(
    db: Database,
    delay: float = SOURCE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> FetchRunResult:
    """Fetch every active source, one after another.

    Sources are never fetched concurrently; the run pauses ``delay`` seconds
    after each source to keep the load on feed hosts low. A failure inside a
    source is logged and the run moves on to the next one. Only a failure to
    list the sources aborts the run.

    Args:
        db: Database instance
        delay: Seconds to wait after each source
        sleep: Sleep function, replaceable for tests

    Returns:
        FetchRunResult with the stored articles in source order
    """
    logger.info("Starting RSS fetch...")
    started = time.monotonic()

    try:
        sources = db.list_sources(active_only=True)
    except sqlite3.Error as e:
        logger.error("RSS fetch failed: %s", e)
        return FetchRunResult(duration=time.monotonic() - started, error=str(e))

    result = FetchRunResult()
    for source in sources:
        try:
            result.articles.extend(fetch_source(db, source))
        except Exception:
            logger.exception("Error fetching source %s", source.name)
        result.sources_fetched += 1
        sleep(delay)

    result.duration = time.monotonic() - started
    logger.info(
        "RSS fetch complete: %d new articles in %.1fs", result.new_articles, result.duration
    )
    return result


class SchedulerError(Exception):
    """Raised when the scheduler cannot be set up."""

    pass


class FetchScheduler:
    """Runs ``fetch_all`` on startup, periodically and on demand.

    At most one run is in flight at a time. A trigger that arrives while a
    run is in progress is rejected and gets a skipped result.
    """

    def __init__(
        self,
        db: Database,
        interval: float = DEFAULT_FETCH_INTERVAL,
        startup_delay: float = DEFAULT_STARTUP_DELAY,
        delay: float = SOURCE_DELAY,
    ):
        if not db.is_ready:
            raise SchedulerError("Database is not initialized")

        self.db = db
        self.interval = interval
        self.startup_delay = startup_delay
        self.delay = delay
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        """True while a fetch run is in progress."""
        return self._lock.locked()

    def run_now(self) -> FetchRunResult:
        """Run a fetch pass unless one is already in progress."""
        if not self._lock.acquire(blocking=False):
            logger.info("Fetch already in progress, skipping trigger")
            return FetchRunResult(skipped=True)

        try:
            return fetch_all(self.db, delay=self.delay)
        finally:
            self._lock.release()

    def run_forever(self, stop_event: Optional[threading.Event] = None) -> None:
        """Run once after the startup delay, then every interval until stopped."""
        stop_event = stop_event or self._stop

        if stop_event.wait(self.startup_delay):
            return

        while True:
            logger.info("Scheduled RSS fetch starting...")
            try:
                self.run_now()
            except Exception:
                logger.exception("Scheduled fetch failed")
            if stop_event.wait(self.interval):
                return

    def start(self) -> None:
        """Start the schedule in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            raise SchedulerError("Scheduler is already started")

        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run_forever, name="newsdash-scheduler", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the background thread to stop and wait for it."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
