"""
Database Resolver.

Maps what the user typed to the databases attached to an app. Databases
are discovered from the app's config vars: every ``*_URL`` var holding a
postgres connection URL is a database, named after the var without the
``_URL`` suffix. DATABASE_URL is an alias for whichever database it
points at, the default.

Accepted spellings for a database named HEROKU_POSTGRESQL_RED:
    RED, HEROKU_POSTGRESQL_RED, HEROKU_POSTGRESQL_RED_URL (any case)
The default database is also reachable as DATABASE or DATABASE_URL.
"""

from urllib.parse import urlsplit

from pgops.cli.models import DatabaseDescriptor
from pgops.core.exceptions import ResolutionError

DEFAULT_VAR = "DATABASE_URL"
COLOR_PREFIX = "HEROKU_POSTGRESQL_"
URL_SCHEMES = ("postgres", "postgresql")


def _is_database_url(value: str) -> bool:
    return urlsplit(value).scheme in URL_SCHEMES


class DatabaseResolver:
    """
    Resolves database names against an app's config vars.

    Usage:
        resolver = DatabaseResolver(platform.config_vars(app))
        db = resolver.resolve("RED", required="promote")
    """

    def __init__(self, config_vars: dict[str, str]) -> None:
        default_url = config_vars.get(DEFAULT_VAR)
        self._databases = sorted(
            (
                DatabaseDescriptor(
                    name=key[: -len("_URL")],
                    url=value,
                    is_default=value == default_url,
                )
                for key, value in config_vars.items()
                if key.endswith("_URL")
                and key != DEFAULT_VAR
                and isinstance(value, str)
                and _is_database_url(value)
            ),
            key=lambda db: db.name,
        )

    def databases(self) -> list[DatabaseDescriptor]:
        """All databases attached to the app, sorted by name."""
        return list(self._databases)

    def default(self) -> DatabaseDescriptor | None:
        return next((db for db in self._databases if db.is_default), None)

    def _lookup(self, name: str) -> DatabaseDescriptor | None:
        key = name.upper()
        if key.endswith("_URL"):
            key = key[: -len("_URL")]
        if key == "DATABASE":
            return self.default()

        candidates = (key, COLOR_PREFIX + key)
        for db in self._databases:
            if db.name in candidates:
                return db
        return None

    def resolve(
        self,
        name: str | None,
        required: str | None = None,
        allow_default: bool = False,
    ) -> DatabaseDescriptor:
        """
        Resolve one database.

        Args:
            name: What the user typed, or None
            required: Command name; when set a name must be given
            allow_default: Fall back to DATABASE_URL when no name is given

        Raises:
            ResolutionError: If no single database matches
        """
        if name:
            db = self._lookup(name)
            if db is None:
                raise ResolutionError(
                    f"Unknown database: {name}. Valid options are: {', '.join(self._valid_options())}"
                )
            return db

        if required:
            raise ResolutionError(f"Usage: pg {required} <DATABASE>")

        if allow_default:
            db = self.default()
            if db is None:
                raise ResolutionError("DATABASE_URL does not point at any attached database")
            return db

        raise ResolutionError("A database name is required")

    def specified_or_all(self, name: str | None) -> list[DatabaseDescriptor]:
        """The named database, or every database when no name is given."""
        if name:
            return [self.resolve(name)]
        return self.databases()

    def name_from_url(self, url: str) -> str:
        """Name of the database at url, or host/dbname when it is not attached."""
        for db in self._databases:
            if db.url == url:
                return db.name
        parts = urlsplit(url)
        return f"{parts.hostname}{parts.path}"

    def _valid_options(self) -> list[str]:
        options = [db.name for db in self._databases]
        if self.default() is not None:
            options.append(DEFAULT_VAR)
        return options
