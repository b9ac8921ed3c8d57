"""
Command line interface.

    yam add DIR...      add game directories to the library
    yam add-url DIR URL add a game directory by its catalog URL
    yam sync            sync the watched threads and show the pending updates
    yam updates         show the pending updates
    yam mark-read ID    hide a pending update
    yam recommend       recommend new games
    yam remove ID       remove a game from the library
"""

import asyncio
import sys
from contextlib import asynccontextmanager
from typing import List, Optional

import aiohttp
import click

from yam_library.catalog import CatalogError, HttpCatalog
from yam_library.config import get_config_manager
from yam_library.database import DatabaseManager
from yam_library.logger import setup_logger
from yam_library.models import GameInfo, Notice, NoticeKind
from yam_library.service import LibraryService

logger = setup_logger()

NOTICE_COLORS = {
    NoticeKind.INFO: "blue",
    NoticeKind.WARNING: "yellow",
    NoticeKind.ERROR: "red",
}


async def prompt_game_selection(desired_name: str, candidates: List[GameInfo]) -> Optional[GameInfo]:
    """Let the user pick a game when several catalog entries share the name"""
    click.echo(f"Several games match '{desired_name}':")
    for number, game in enumerate(candidates, start=1):
        click.echo(f"  {number} - {game.name} [{game.author}] [{game.version}]")
    choice = click.prompt(
        "Select a game (0 to skip)",
        type=click.IntRange(0, len(candidates)),
        default=0,
    )
    return candidates[choice - 1] if choice else None


def echo_notices(notices: List[Notice]):
    for notice in notices:
        click.secho(notice.message, fg=NOTICE_COLORS[notice.kind])


@asynccontextmanager
async def open_service(ctx_obj):
    config = get_config_manager()
    headers = {"User-Agent": config.user_agent}
    if ctx_obj.get("cookie"):
        headers["Cookie"] = ctx_obj["cookie"]

    async with aiohttp.ClientSession(
        headers=headers,
        timeout=aiohttp.ClientTimeout(total=config.catalog_timeout),
    ) as session:
        catalog = HttpCatalog(config.catalog_base_url, session=session)
        async with DatabaseManager(ctx_obj.get("database") or config.database_path) as db:
            yield LibraryService(
                db.games,
                db.threads,
                catalog,
                config=config,
                select_game=prompt_game_selection,
            )


def run(coro):
    """Run a command coroutine, turning catalog failures into exit code 1"""
    try:
        return asyncio.run(coro)
    except CatalogError as e:
        logger.error(f"Catalog error: {e}")
        click.secho(f"Catalog error: {e}", fg="red", err=True)
        sys.exit(1)


@click.group()
@click.option("--database", type=click.Path(dir_okay=False), help="SQLite database to use.")
@click.option("--cookie", envvar="YAM_SESSION_COOKIE", help="Session cookie for the catalog.")
@click.pass_context
def cli(ctx, database, cookie):
    """Track installed games, watched threads and recommendations."""
    ctx.ensure_object(dict)
    ctx.obj["database"] = database
    ctx.obj["cookie"] = cookie


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(exists=True, file_okay=False))
@click.pass_obj
def add(obj, paths):
    """Add game directories to the library."""
    async def _add():
        async with open_service(obj) as service:
            return await service.add_games(paths)

    report = run(_add())
    echo_notices(report.notices)
    click.echo(f"{len(report.added)} games added")


@cli.command("add-url")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.argument("url")
@click.pass_obj
def add_url(obj, path, url):
    """Add a game directory identified by its catalog URL."""
    async def _add():
        async with open_service(obj) as service:
            return await service.add_game_from_url(path, url)

    report = run(_add())
    echo_notices(report.notices)
    click.echo(f"{len(report.added)} games added")


@cli.command()
@click.pass_obj
def sync(obj):
    """Sync the watched threads and show the pending updates."""
    async def _sync():
        async with open_service(obj) as service:
            return await service.refresh()

    dashboard = run(_sync())
    report = dashboard.sync
    click.echo(
        f"{len(report.inserted)} new threads, {len(report.updated)} updated, "
        f"{len(report.skipped)} skipped, {len(report.failed)} failed"
    )
    for thread in dashboard.pending_updates:
        click.echo(f"[{thread.id}] {thread.name} {thread.version} - {thread.url}")


@cli.command()
@click.pass_obj
def updates(obj):
    """Show the updated threads not yet marked as read."""
    async def _updates():
        async with open_service(obj) as service:
            return await service.get_pending_updates()

    for thread in run(_updates()):
        click.echo(f"[{thread.id}] {thread.name} {thread.version} - {thread.url}")


@cli.command("mark-read")
@click.argument("thread_id", type=int)
@click.pass_obj
def mark_read(obj, thread_id):
    """Hide a pending update."""
    async def _mark():
        async with open_service(obj) as service:
            return await service.mark_as_read(thread_id)

    if not run(_mark()):
        click.secho(f"Unknown thread {thread_id}", fg="yellow")
        sys.exit(1)


@cli.command()
@click.pass_obj
def recommend(obj):
    """Recommend games based on the tags of installed and watched games."""
    async def _recommend():
        async with open_service(obj) as service:
            return await service.recommend()

    for game in run(_recommend()):
        click.echo(f"[{game.id}] {game.name} ({', '.join(game.tags)}) - {game.url}")


@cli.command()
@click.argument("game_id", type=int)
@click.pass_obj
def remove(obj, game_id):
    """Remove a game from the library (files are kept)."""
    async def _remove():
        async with open_service(obj) as service:
            return await service.remove_game(game_id)

    if not run(_remove()):
        click.secho(f"Unknown game {game_id}", fg="yellow")
        sys.exit(1)
