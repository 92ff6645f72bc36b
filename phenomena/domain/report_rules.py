from __future__ import annotations

import datetime as dt
from typing import Callable

from ..errors import AlreadyClosed, Closed, Expired, InvalidCredential, NotFound

Clock = Callable[[], dt.datetime]

# each new comment pushes the expiration horizon to now + this
EXPIRATION_WINDOW = dt.timedelta(days=1)


def utcnow() -> dt.datetime:
    """Naive UTC now, matching what SQLite's datetime('now') stores."""
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


def format_ts(value: dt.datetime) -> str:
    return value.isoformat(sep=" ")


def parse_ts(value: str | dt.datetime) -> dt.datetime:
    if isinstance(value, dt.datetime):
        return value
    return dt.datetime.fromisoformat(value)


def next_expiration(now: dt.datetime) -> dt.datetime:
    return now + EXPIRATION_WINDOW


def is_expired(expiration_date: str | dt.datetime, now: dt.datetime) -> bool:
    return parse_ts(expiration_date) < now


def check_closable(report, report_id, password: str) -> None:
    """
    Raise the first failing close precondition.

    Order: existence -> password -> already closed.
    """
    if report is None:
        raise NotFound(report_id)
    if report["password"] != password:
        raise InvalidCredential(report_id)
    if not report["is_open"]:
        raise AlreadyClosed(report_id)


def check_commentable(report, report_id, now: dt.datetime) -> None:
    """
    Raise the first failing comment precondition.

    Order: existence -> open -> not expired. Expiry is checked even on open
    reports; it is never stored as a state change.
    """
    if report is None:
        raise NotFound(report_id)
    if not report["is_open"]:
        raise Closed(report_id)
    if is_expired(report["expiration_date"], now):
        raise Expired(report_id)
