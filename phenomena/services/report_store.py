"""
ReportStore: report/comment lifecycle rules over a SQLite connection.

The connection and the clock are injected; nothing here reads module-level
state. Every public method returns ``Ok(value)`` or ``Err(error)``.
"""
from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict
from typing import Any, Callable, Dict, List

from ..db import transaction
from ..logs import LogContext
from ..errors import AlreadyClosed, Err, Ok, ReportError, Result, StoreFailure
from ..domain.models import Comment, OpenReport, Report
from ..domain.report_rules import (
    Clock,
    check_closable,
    check_commentable,
    format_ts,
    is_expired,
    next_expiration,
    utcnow,
)
from ..repository import comment_repo, report_repo

logger = logging.getLogger(__name__)


class ReportStore:
    def __init__(self, conn: sqlite3.Connection, clock: Clock = utcnow):
        self.conn = conn
        self.clock = clock

    # ---------------- reports ----------------

    def list_open_reports(self) -> Result[List[OpenReport]]:
        """Open reports with their comments and a read-time is_expired flag."""
        def op() -> List[OpenReport]:
            now = self.clock()
            rows = report_repo.list_open(self.conn)
            by_report: Dict[int, List[Comment]] = defaultdict(list)
            for c in comment_repo.list_for_reports(self.conn, [r["id"] for r in rows]):
                by_report[int(c["report_id"])].append(Comment.from_row(c))
            return [
                OpenReport.from_row(
                    r,
                    comments=by_report.get(int(r["id"]), []),
                    is_expired=is_expired(r["expiration_date"], now),
                )
                for r in rows
            ]

        return self._run(None, op)

    def create_report(self, title: str, location: str, description: str, password: str) -> Result[Report]:
        log = LogContext("CREATE_REPORT")
        log.set_payload({"title": title, "location": location, "description": description})

        def op() -> Report:
            expiration = format_ts(next_expiration(self.clock()))
            report_id = report_repo.insert_report(
                self.conn, title, location, description, password, expiration
            )
            log.set_entity("report", report_id)
            report = Report.from_row(report_repo.get_public(self.conn, report_id))
            log.set_after(report.to_dict())
            return report

        return self._run(log, op)

    def close_report(self, report_id, password: str) -> Result[Dict[str, str]]:
        log = LogContext("CLOSE_REPORT")
        log.set_entity("report", report_id)

        def op() -> Dict[str, str]:
            with transaction(self.conn):
                report = self._get_report(report_id)
                check_closable(report, report_id, password)
                # conditional on is_open=1, so a stale lookup still reports AlreadyClosed
                if not report_repo.close_if_open(self.conn, report_id):
                    raise AlreadyClosed(report_id)
            log.set_before({"is_open": True})
            log.set_after({"is_open": False})
            return {"message": "Success"}

        return self._run(log, op)

    # ---------------- comments ----------------

    def create_report_comment(self, report_id, content: str) -> Result[Comment]:
        log = LogContext("CREATE_COMMENT")
        log.set_entity("report", report_id)
        log.set_payload({"content": content})

        def op() -> Comment:
            now = self.clock()
            with transaction(self.conn):
                report = self._get_report(report_id)
                check_commentable(report, report_id, now)
                comment_id = comment_repo.insert_comment(self.conn, report_id, content)
                expiration = format_ts(next_expiration(now))
                report_repo.set_expiration(self.conn, report_id, expiration)
                comment = Comment.from_row(comment_repo.get_comment(self.conn, comment_id))
            log.set_before({"expiration_date": report["expiration_date"]})
            log.set_after({"expiration_date": expiration, "comment_id": comment.id})
            return comment

        return self._run(log, op)

    # ---------------- internals ----------------

    def _get_report(self, report_id):
        """Full row including password; only for the close/comment checks."""
        return report_repo.get_report(self.conn, report_id)

    def _run(self, log: LogContext | None, op: Callable[[], Any]) -> Result[Any]:
        try:
            value = op()
        except ReportError as e:
            logger.info("%s rejected: %s", log.action if log else "READ", e.message)
            self._write_log(log, "ERROR", e.message)
            return Err(e)
        except sqlite3.Error as e:
            logger.exception("store failure during %s", log.action if log else "READ")
            err = StoreFailure(f"Store failure: {e}")
            err.__cause__ = e
            self._write_log(log, "ERROR", err.message)
            return Err(err)
        self._write_log(log, "OK")
        return Ok(value)

    def _write_log(self, log: LogContext | None, result: str, err: str | None = None) -> None:
        if log is None:
            return
        try:
            log.write(self.conn, result, err)
        except sqlite3.Error as e:
            logger.warning("operation_log write failed for %s: %s", log.action, e)
