"""
CLI Models.

Database descriptors resolved from the app's config vars, and status
snapshots returned by the database service.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

SHARED_DATABASE = "SHARED_DATABASE"


class DatabaseState(str, Enum):
    """Lifecycle states the commands react to. Other states pass through as strings."""

    AVAILABLE = "available"
    DEPROVISIONED = "deprovisioned"
    FAILED = "failed"
    DOWNLOADING = "downloading"
    STANDBY = "standby"


class DatabaseDescriptor(BaseModel):
    """Identifies one database attached to the app."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    is_default: bool = False

    @property
    def pretty_name(self) -> str:
        if self.is_default:
            return f"{self.name} (DATABASE_URL)"
        return self.name

    @property
    def is_shared(self) -> bool:
        return self.name == SHARED_DATABASE


class InfoItem(BaseModel):
    """One label/value row of database information."""

    name: str
    value: str | int | float | None = None
    resolve_db_name: bool = False


class DatabaseStatus(BaseModel):
    """Point-in-time status of a database as reported by the database service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    state: str
    size_bytes: int | None = Field(default=None, alias="database_dir_size")
    current_transaction: int | None = None
    target_transaction: int | None = None
    following_url: str | None = Field(default=None, alias="following")
    info: list[InfoItem] = Field(default_factory=list)
