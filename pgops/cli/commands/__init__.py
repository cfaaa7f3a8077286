"""
CLI Commands.

Organized by domain/feature area.
"""

from pgops.cli.commands.pg import app as pg_app

__all__ = [
    "pg_app",
]
