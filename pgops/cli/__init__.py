"""
CLI Module.

Command-line plugin built with Typer for managing hosted PostgreSQL
databases through the platform and database service APIs.

Architecture:
- CLI is a thin presentation layer
- All database state lives in the remote services
- CLI calls the services via HTTP (httpx)

Usage:
    python cli.py --help
    python cli.py pg info
    python cli.py pg wait RED
"""
