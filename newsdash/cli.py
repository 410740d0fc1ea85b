"""CLI commands for newsdash."""

from pathlib import Path
from typing import NoReturn, Optional

import click

from .commands import FeedCommandError, add_feed_from_command
from .controllers import (
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
from .db import DEFAULT_ARTICLE_LIMIT, Database
from .fetcher import fetch_source_by_name
from .logging_utils import setup_logging
from .scheduler import (
    DEFAULT_FETCH_INTERVAL,
    DEFAULT_STARTUP_DELAY,
    SOURCE_DELAY,
    FetchScheduler,
    fetch_all,
)


@click.group()
@click.version_option()
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="NEWSDASH_DB",
    help="SQLite database path (default: ~/.newsdash/newsdash.db)",
)
@click.option("--log-level", help="Log level, e.g. INFO or DEBUG (default: $NEWSDASH_LOG_LEVEL or WARNING)")
@click.pass_context
def cli(ctx: click.Context, db_path: Optional[Path], log_level: Optional[str]):
    """newsdash - Aggregate RSS feeds into a personal reading list."""
    setup_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path


def _open_db(ctx: click.Context) -> Database:
    return Database(ctx.obj.get("db_path"))


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"))
    raise SystemExit(1)


@cli.command()
@click.argument("name")
@click.argument("url")
@click.option("--category", "-c", default="Other", show_default=True, help="Source category")
@click.option("--no-fetch", is_flag=True, help="Do not fetch the new source right away")
@click.pass_context
def add(ctx: click.Context, name: str, url: str, category: str, no_fetch: bool):
    """Add a new feed source."""
    db = _open_db(ctx)
    try:
        source, articles = add_source(db, name, url, category, fetch=not no_fetch)
        click.echo(click.style(f"Added source '{source.name}'", fg="green"))
        if not no_fetch:
            click.echo(f"Fetched {len(articles)} article(s)")
    except SourceAlreadyExistsError as e:
        _fail(str(e))
    finally:
        db.close()


@cli.command()
@click.pass_context
def seed(ctx: click.Context):
    """Add the default feed sources."""
    db = _open_db(ctx)
    try:
        added = seed_default_sources(db)
        if not added:
            click.echo("All default sources are already present.")
            return
        for source in added:
            click.echo(click.style(f"Added source '{source.name}'", fg="green"))
    finally:
        db.close()


@cli.command("sources")
@click.option("--all", "-a", "show_all", is_flag=True, help="Include inactive sources")
@click.pass_context
def list_sources(ctx: click.Context, show_all: bool):
    """List feed sources."""
    db = _open_db(ctx)
    try:
        sources = db.list_sources(active_only=not show_all)
        if not sources:
            click.echo("No sources yet. Use 'newsdash add' or 'newsdash seed' to add some.")
            return

        click.echo(click.style(f"Sources ({len(sources)}):", fg="cyan", bold=True))
        click.echo()

        for source in sources:
            label = click.style(f"  {source.name}", fg="white", bold=True)
            if not source.active:
                label += click.style(" [inactive]", fg="bright_black")
            click.echo(label)
            click.echo(f"    URL: {source.url}")
            click.echo(f"    Category: {source.category}")
            if source.last_fetched:
                click.echo(f"    Last fetched: {source.last_fetched.strftime('%Y-%m-%d %H:%M')}")
            click.echo()
    finally:
        db.close()


@cli.command()
@click.argument("name")
@click.pass_context
def deactivate(ctx: click.Context, name: str):
    """Stop fetching a source (its articles are kept)."""
    _set_active(ctx, name, False)


@cli.command()
@click.argument("name")
@click.pass_context
def activate(ctx: click.Context, name: str):
    """Resume fetching a deactivated source."""
    _set_active(ctx, name, True)


def _set_active(ctx: click.Context, name: str, active: bool) -> None:
    db = _open_db(ctx)
    try:
        set_source_active(db, name, active)
        state = "activated" if active else "deactivated"
        click.echo(click.style(f"Source '{name}' {state}", fg="green"))
    except SourceNotFoundError as e:
        _fail(str(e))
    finally:
        db.close()


@cli.command()
@click.argument("source_name", required=False)
@click.option("--delay", type=float, default=SOURCE_DELAY, show_default=True, help="Seconds between sources")
@click.pass_context
def fetch(ctx: click.Context, source_name: Optional[str], delay: float):
    """Fetch new articles.

    If SOURCE_NAME is provided, only that source is fetched.
    Otherwise, all active sources are fetched one after another.
    """
    db = _open_db(ctx)
    try:
        if source_name:
            articles = fetch_source_by_name(db, source_name)
            if articles is None:
                _fail(f"Source '{source_name}' not found")
            click.echo(f"  {source_name}: {len(articles)} article(s)")
            return

        sources = db.list_sources(active_only=True)
        if not sources:
            click.echo("No active sources. Use 'newsdash add' or 'newsdash seed' to add some.")
            return

        click.echo(click.style(f"Fetching {len(sources)} source(s)...", fg="cyan"))
        result = fetch_all(db, delay=delay)

        if result.error:
            _fail(f"Fetch failed: {result.error}")

        click.echo()
        if result.new_articles > 0:
            click.echo(
                click.style(
                    f"Fetched {result.new_articles} article(s) in {result.duration:.1f}s",
                    fg="green",
                    bold=True,
                )
            )
        else:
            click.echo(click.style("No new articles found.", fg="yellow"))
    finally:
        db.close()


@cli.command()
@click.option("--unread", "-u", "unread_only", is_flag=True, help="Only unread articles")
@click.option("--saved", "-s", "saved_only", is_flag=True, help="Only saved articles")
@click.option("--category", "-c", help="Filter by source category")
@click.option("--source", "source_name", help="Filter by source name")
@click.option("--limit", "-n", type=int, default=DEFAULT_ARTICLE_LIMIT, show_default=True)
@click.pass_context
def articles(
    ctx: click.Context,
    unread_only: bool,
    saved_only: bool,
    category: Optional[str],
    source_name: Optional[str],
    limit: int,
):
    """List articles, newest first."""
    db = _open_db(ctx)
    try:
        try:
            articles_list = get_articles(
                db,
                unread_only=unread_only,
                saved_only=saved_only,
                category=category,
                source_name=source_name,
                limit=limit,
            )
        except SourceNotFoundError as e:
            _fail(str(e))

        if not articles_list:
            click.echo("No articles found.")
            return

        click.echo(click.style(f"Articles ({len(articles_list)}):", fg="cyan", bold=True))
        click.echo()

        for article in articles_list:
            _print_article(article)
    finally:
        db.close()


def _print_article(article):
    """Print a single article."""
    status = click.style("[read]", fg="bright_black") if article.is_read else click.style("[new]", fg="yellow")
    saved = click.style(" [saved]", fg="magenta") if article.is_saved else ""
    id_str = click.style(f"[{article.id}]", fg="cyan")

    click.echo(f"  {id_str} {status}{saved} {article.title}")
    click.echo(f"       Source: {article.source}")
    click.echo(f"       URL: {article.url}")
    meta = f"{article.read_time} min read"
    if article.published_date:
        meta = f"{article.published_date.strftime('%Y-%m-%d')} | {meta}"
    if article.author:
        meta += f" | {article.author}"
    click.echo(f"       {meta}")
    if article.summary:
        click.echo(f"       {article.summary}")
    click.echo()


@cli.command()
@click.argument("article_id", type=int)
@click.pass_context
def read(ctx: click.Context, article_id: int):
    """Mark an article as read."""
    db = _open_db(ctx)
    try:
        article = mark_article_read(db, article_id)
        if article.is_read:
            click.echo(f"Article {article_id} is already marked as read.")
        else:
            click.echo(click.style(f"Marked article {article_id} as read", fg="green"))
    except ArticleNotFoundError as e:
        _fail(str(e))
    finally:
        db.close()


@cli.command()
@click.argument("article_id", type=int)
@click.pass_context
def unread(ctx: click.Context, article_id: int):
    """Mark an article as unread."""
    db = _open_db(ctx)
    try:
        article = mark_article_unread(db, article_id)
        if not article.is_read:
            click.echo(f"Article {article_id} is already marked as unread.")
        else:
            click.echo(click.style(f"Marked article {article_id} as unread", fg="green"))
    except ArticleNotFoundError as e:
        _fail(str(e))
    finally:
        db.close()


@cli.command()
@click.argument("article_id", type=int)
@click.pass_context
def save(ctx: click.Context, article_id: int):
    """Toggle an article's saved flag."""
    db = _open_db(ctx)
    try:
        article = toggle_article_saved(db, article_id)
        state = "Saved" if article.is_saved else "Unsaved"
        click.echo(click.style(f"{state} article {article_id}", fg="green"))
    except ArticleNotFoundError as e:
        _fail(str(e))
    finally:
        db.close()


@cli.command()
@click.pass_context
def stats(ctx: click.Context):
    """Show article counts."""
    db = _open_db(ctx)
    try:
        counts = get_stats(db)
        click.echo(f"Total: {counts['total']} | Unread: {counts['unread']} | Saved: {counts['saved']}")
    finally:
        db.close()


@cli.command()
@click.option("--top", "-n", type=int, default=10, show_default=True, help="Number of articles to show")
@click.pass_context
def score(ctx: click.Context, top: int):
    """Score all articles by keyword relevance and show the best."""
    db = _open_db(ctx)
    try:
        ranked = rescore_articles(db)
        if not ranked:
            click.echo("No articles found.")
            return

        for article in ranked[:top]:
            click.echo(f"  {click.style(str(article.score).rjust(2), fg='cyan')}  [{article.id}] {article.title}")
    finally:
        db.close()


@cli.command("feed-command")
@click.argument("message")
@click.pass_context
def feed_command(ctx: click.Context, message: str):
    """Add a feed from a chat-style message, e.g. "Add RSS feed: URL"."""
    db = _open_db(ctx)
    try:
        result = add_feed_from_command(db, message)
        if result is None:
            click.echo("No feed command detected.")
            return

        source, articles_list = result
        click.echo(click.style(f'Feed "{source.name}" added successfully', fg="green"))
        click.echo(f"Category: {source.category} | Fetched {len(articles_list)} article(s)")
    except (FeedCommandError, SourceAlreadyExistsError) as e:
        _fail(str(e))
    finally:
        db.close()


@cli.command()
@click.option(
    "--interval",
    type=float,
    default=DEFAULT_FETCH_INTERVAL / 3600,
    show_default=True,
    help="Hours between scheduled fetches",
)
@click.option(
    "--startup-delay",
    type=float,
    default=DEFAULT_STARTUP_DELAY,
    show_default=True,
    help="Seconds before the first fetch",
)
@click.pass_context
def watch(ctx: click.Context, interval: float, startup_delay: float):
    """Fetch on startup and then periodically until interrupted."""
    db = _open_db(ctx)
    try:
        scheduler = FetchScheduler(db, interval=interval * 3600, startup_delay=startup_delay)
        click.echo(click.style(f"Fetching feeds every {interval:g} hour(s). Press Ctrl+C to stop.", fg="cyan"))
        scheduler.run_forever()
    except KeyboardInterrupt:
        click.echo("Stopped.")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
