"""
Database Status Poller.

Polls a database's status until it settles and keeps a single progress
line up to date while it does.
"""

import time
from collections.abc import Callable

from pgops.cli.display import LineDisplay
from pgops.cli.models import DatabaseDescriptor, DatabaseState, DatabaseStatus
from pgops.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

SPINNER = ("/", "-", "\\", "|")

TERMINAL_MESSAGES = {
    DatabaseState.AVAILABLE.value: "is available",
    DatabaseState.DEPROVISIONED.value: "has been destroyed",
    DatabaseState.FAILED.value: "encountered an error",
}


def spinner(ticks: int) -> str:
    return SPINNER[ticks % len(SPINNER)]


def _counter(value: int | None) -> str:
    return "" if value is None else str(value)


def wait_for(
    db: DatabaseDescriptor,
    fetch: Callable[[], DatabaseStatus],
    display: LineDisplay,
    interval: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Poll ``fetch`` until the database reaches a settled state.

    Each tick renders exactly one line. In-progress lines overwrite each
    other through ``display.update``; the settled line is written with
    ``display.commit`` and ends the loop. Errors raised by ``fetch`` are
    not retried and propagate to the caller.

    Args:
        db: Database being watched
        fetch: Returns a fresh status snapshot
        display: Line to render progress into
        interval: Seconds to sleep between ticks
        sleep: Sleep function, replaceable in tests
    """
    name = f"database {db.pretty_name}"
    ticks = 0

    while True:
        status = fetch()
        state = status.state

        if state in TERMINAL_MESSAGES:
            display.commit(f"The {name} {TERMINAL_MESSAGES[state]}")
            break

        if state == DatabaseState.DOWNLOADING:
            detail = f"({status.size_bytes or 0} bytes)"
        elif state == DatabaseState.STANDBY:
            detail = f"({_counter(status.current_transaction)}/{_counter(status.target_transaction)})"
            if status.following_url:
                display.commit(f"The {name} is now following")
                break
        else:
            detail = ""

        display.update(f"{state.capitalize()} {name} {spinner(ticks)} {detail}".rstrip())
        ticks += 1
        sleep(interval)

    log_with_source(logger, "cli", "info", "Database settled", database=db.name, state=state, ticks=ticks)
