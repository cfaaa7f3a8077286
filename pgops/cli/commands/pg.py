"""
Database Commands.

Lifecycle commands for the PostgreSQL databases attached to an app:
info, ingress, promote, psql, reset, unfollow and wait.

The target app is read from settings (PLATFORM_APP). All state changes
happen remotely; these commands resolve the database, ask for
confirmation where data is at stake, and report progress.
"""

import os
import subprocess
import time
from collections.abc import Iterator
from contextlib import closing, contextmanager
from typing import Optional
from urllib.parse import urlsplit

import httpx
import typer
from rich.console import Console

from pgops.cli.client import PlatformClient, get_database_client, get_platform_client
from pgops.cli.display import (
    ConsoleLine,
    confirm_command,
    display_error,
    display_info,
    working,
)
from pgops.cli.formatting import size_format
from pgops.cli.models import DatabaseDescriptor, DatabaseState
from pgops.cli.poller import wait_for
from pgops.cli.resolver import DatabaseResolver
from pgops.core.config import get_app_config, get_settings
from pgops.core.exceptions import ApplicationError, CommandAborted
from pgops.core.logging import get_logger, log_with_source

app = typer.Typer(help="Manage hosted PostgreSQL databases")
console = Console()
line = ConsoleLine(console)
logger = get_logger(__name__)

INGRESS_STATES = (DatabaseState.AVAILABLE, DatabaseState.STANDBY)
DEFAULT_PORT = 5432


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn application and transport errors into a one-line message and exit 1."""
    try:
        yield
    except ApplicationError as e:
        log_with_source(logger, "cli", "info", "Command failed", code=e.code, error=e.message)
        display_error(console, e.message)
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        log_with_source(logger, "cli", "warning", "API error", status_code=e.response.status_code)
        display_error(console, f"API error {e.response.status_code}: {_error_detail(e.response)}")
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        log_with_source(logger, "cli", "warning", "Transport error", error=str(e))
        display_error(console, f"Cannot reach the API: {e}")
        raise typer.Exit(1)


def _error_detail(response: httpx.Response) -> str:
    """Best-effort message from an error response body."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "request failed"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


def _app_name() -> str:
    return get_settings().require_app()


def _resolver(platform: PlatformClient, app_name: str) -> DatabaseResolver:
    return DatabaseResolver(platform.config_vars(app_name))


# =============================================================================
# info
# =============================================================================


@app.command()
def info(
    database: Optional[str] = typer.Argument(None, help="Database name; all databases when omitted"),
) -> None:
    """
    Display database information.

    Defaults to all databases if no DATABASE is specified.

    Examples:
        cli.py pg info
        cli.py pg info RED
    """
    with handle_errors():
        app_name = _app_name()
        with closing(get_platform_client()) as platform:
            resolver = _resolver(platform, app_name)
            for db in resolver.specified_or_all(database):
                _display_db_info(platform, resolver, app_name, db)


def _display_db_info(
    platform: PlatformClient,
    resolver: DatabaseResolver,
    app_name: str,
    db: DatabaseDescriptor,
) -> None:
    console.print(f"=== {db.pretty_name}", style="bold", markup=False, highlight=False)

    if db.is_shared:
        attrs = platform.app_info(app_name)
        display_info(console, "Data Size", size_format(int(attrs.get("database_size") or 0)))
    else:
        with closing(get_database_client(db.url)) as client:
            status = client.get_database()
        for item in status.info:
            if item.value is None:
                value = ""
            elif item.resolve_db_name:
                value = resolver.name_from_url(str(item.value))
            else:
                value = item.value
            display_info(console, item.name, value)

    console.print()


# =============================================================================
# ingress / psql
# =============================================================================


def _grant_ingress(database: Optional[str], action: str) -> str:
    """
    Open the database to this IP and return its connection URL.

    Raises:
        CommandAborted: For the shared database or a database that is not up
    """
    app_name = _app_name()
    with closing(get_platform_client()) as platform:
        db = _resolver(platform, app_name).resolve(database, allow_default=True)

    if db.is_shared:
        raise CommandAborted("Cannot ingress to a shared database")

    with closing(get_database_client(db.url)) as client:
        if client.get_database().state not in INGRESS_STATES:
            raise CommandAborted("The database is not available")
        with working(line, f"{action} to {db.name}"):
            client.ingress()

    log_with_source(logger, "cli", "info", "Ingress granted", database=db.name)
    return db.url


@app.command()
def ingress(
    database: Optional[str] = typer.Argument(None, help="Database name; DATABASE_URL when omitted"),
) -> None:
    """
    Allow direct connections to the database from this IP for one minute.

    Dedicated databases only. Defaults to DATABASE_URL if no DATABASE is specified.

    Examples:
        cli.py pg ingress
        cli.py pg ingress RED
    """
    with handle_errors():
        parts = urlsplit(_grant_ingress(database, "Granting ingress for 60s"))

    console.print("Connection info string:")
    console.print(
        f'   "dbname={parts.path[1:]} host={parts.hostname} user={parts.username or ""} '
        f'password={parts.password or ""} sslmode=require"',
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


@app.command()
def psql(
    database: Optional[str] = typer.Argument(None, help="Database name; DATABASE_URL when omitted"),
) -> None:
    """
    Open a psql shell to the database.

    Dedicated databases only. Defaults to DATABASE_URL if no DATABASE is specified.

    Examples:
        cli.py pg psql
        cli.py pg psql RED
    """
    with handle_errors():
        parts = urlsplit(_grant_ingress(database, "Connecting"))

        env = {
            **os.environ,
            "PGPASSWORD": parts.password or "",
            "PGSSLMODE": "require",
        }
        cmd = [
            "psql",
            "-U", parts.username or "",
            "-h", parts.hostname or "",
            "-p", str(parts.port or DEFAULT_PORT),
            parts.path[1:],
        ]

        try:
            result = subprocess.run(cmd, env=env)
        except FileNotFoundError:
            raise CommandAborted("psql not found. Install the PostgreSQL client tools.")

    if result.returncode != 0:
        raise typer.Exit(result.returncode)


# =============================================================================
# promote
# =============================================================================


@app.command()
def promote(
    database: str = typer.Argument(..., help="Database to set as DATABASE_URL"),
) -> None:
    """
    Set DATABASE as your DATABASE_URL.

    Examples:
        cli.py pg promote RED
    """
    with handle_errors():
        app_name = _app_name()
        with closing(get_platform_client()) as platform:
            db = _resolver(platform, app_name).resolve(database, required="promote")
            if db.is_default:
                raise CommandAborted(f"DATABASE_URL is already set to {db.name}")

            console.print(f"Promoting {db.name} to DATABASE_URL", markup=False, highlight=False)
            if not confirm_command(console, app_name):
                return

            with working(line, "Updating DATABASE_URL"):
                platform.set_config_vars(app_name, {"DATABASE_URL": db.url})

        log_with_source(logger, "cli", "info", "Database promoted", database=db.name)
        display_info(console, f"DATABASE_URL ({db.name})", db.url)


# =============================================================================
# reset
# =============================================================================


@app.command()
def reset(
    database: str = typer.Argument(..., help="Database to wipe"),
) -> None:
    """
    Delete all data in DATABASE.

    Examples:
        cli.py pg reset RED
    """
    with handle_errors():
        app_name = _app_name()
        with closing(get_platform_client()) as platform:
            db = _resolver(platform, app_name).resolve(database, required="reset")

            console.print(f"Resetting {db.pretty_name}", markup=False, highlight=False)
            if not confirm_command(console, app_name):
                return

            with working(line, "Resetting"):
                if db.is_shared:
                    platform.reset_shared_database(app_name)
                else:
                    with closing(get_database_client(db.url)) as client:
                        client.reset()

        log_with_source(logger, "cli", "info", "Database reset", database=db.name)


# =============================================================================
# unfollow
# =============================================================================


@app.command()
def unfollow(
    database: str = typer.Argument(..., help="Follower database to make writable"),
) -> None:
    """
    Stop a follower from following and make it a read/write database.

    Examples:
        cli.py pg unfollow RED
    """
    with handle_errors():
        app_name = _app_name()
        with closing(get_platform_client()) as platform:
            resolver = _resolver(platform, app_name)
        db = resolver.resolve(database, required="unfollow")

        if db.is_shared:
            display_error(console, "SHARED_DATABASE is not following another database")
            return

        with closing(get_database_client(db.url)) as client:
            origin_url = client.get_database().following_url
            if not origin_url:
                display_error(console, f"{db.pretty_name} is not following another database")
                return

            origin_name = resolver.name_from_url(origin_url)
            display_error(console, f"{db.pretty_name} will become writable and no longer")
            display_error(console, f"follow {origin_name}. This cannot be undone.")
            if not confirm_command(console, app_name):
                return

            with working(line, "Unfollowing"):
                client.unfollow()

        log_with_source(logger, "cli", "info", "Database unfollowed", database=db.name, origin=origin_name)


# =============================================================================
# wait
# =============================================================================


@app.command()
def wait(
    database: Optional[str] = typer.Argument(None, help="Database name; all databases when omitted"),
) -> None:
    """
    Monitor database creation, exit when complete.

    Defaults to all databases if no DATABASE is specified.

    Examples:
        cli.py pg wait
        cli.py pg wait RED
    """
    with handle_errors():
        app_name = _app_name()
        interval = get_app_config().application.wait.interval_seconds

        if not database:
            console.print("Checking availability of all databases")

        with closing(get_platform_client()) as platform:
            databases = _resolver(platform, app_name).specified_or_all(database)

        for db in databases:
            if db.is_shared:
                continue
            with closing(get_database_client(db.url)) as client:
                wait_for(db, client.get_database, line, interval=interval, sleep=time.sleep)
