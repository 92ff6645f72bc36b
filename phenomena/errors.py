"""Error taxonomy for report/comment operations and the Ok/Err result wrapper.

ReportStore never raises these for expected failures; it returns ``Err(error)``
so callers have to look at ``result.ok`` (or call ``unwrap()`` to get the
exception-raising behaviour back).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ReportError(Exception):
    kind = "error"

    def __init__(self, message: str, report_id: Any = None):
        super().__init__(message)
        self.message = message
        self.report_id = report_id


class NotFound(ReportError):
    kind = "not_found"

    def __init__(self, report_id: Any):
        super().__init__(f"Report with id {report_id} does not exist.", report_id)


class InvalidCredential(ReportError):
    kind = "invalid_credential"

    def __init__(self, report_id: Any):
        super().__init__(f"Invalid password for report with id {report_id}.", report_id)


class AlreadyClosed(ReportError):
    kind = "already_closed"

    def __init__(self, report_id: Any):
        super().__init__(f"Report with id {report_id} is already closed.", report_id)


class Closed(ReportError):
    kind = "closed"

    def __init__(self, report_id: Any):
        super().__init__(f"Report with id {report_id} is closed.", report_id)


class Expired(ReportError):
    kind = "expired"

    def __init__(self, report_id: Any):
        super().__init__(f"Report with id {report_id} has expired.", report_id)


class StoreFailure(ReportError):
    kind = "store_failure"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: ReportError
    ok = False

    @property
    def kind(self) -> str:
        return self.error.kind

    @property
    def message(self) -> str:
        return self.error.message

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err]
