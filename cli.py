#!/usr/bin/env python3
"""
pgops CLI.

Lifecycle commands for hosted PostgreSQL databases.
Built with Typer for type-safe commands and Rich for formatted output.

Usage:
    python cli.py --help                 # Show help

    python cli.py pg info                # Show all databases
    python cli.py pg info RED            # Show one database
    python cli.py pg wait                # Wait for all databases to settle
    python cli.py pg promote RED         # Make RED the DATABASE_URL
    python cli.py pg reset RED           # Delete all data in RED
    python cli.py pg unfollow RED        # Make a follower writable
    python cli.py pg ingress             # Open DATABASE_URL to this IP
    python cli.py pg psql RED            # Open a psql shell

Options:
    --verbose, -v     Enable verbose output
    --debug           Enable debug mode (detailed logging)
    --help            Show help message
"""

import sys
from pathlib import Path

import typer
from rich.console import Console

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from pgops.cli.commands import pg_app
from pgops.core.config import validate_project_root

app = typer.Typer(
    name="pgops",
    help="pgops - Manage hosted PostgreSQL databases.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

app.add_typer(pg_app, name="pg")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    pgops CLI.

    Inspect, promote, reset, unfollow and wait on the databases of the
    app named by PLATFORM_APP.
    """
    validate_project_root()

    from pgops.core.logging import setup_logging

    if debug:
        setup_logging(level="DEBUG", format_type="console")
        console.print("[dim]Debug mode enabled[/dim]")
    elif verbose:
        setup_logging(level="INFO", format_type="console")
    else:
        setup_logging()


if __name__ == "__main__":
    app()
