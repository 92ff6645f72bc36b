from __future__ import annotations

from sqlite3 import Connection
from typing import Iterable


def insert_comment(conn: Connection, report_id, content: str) -> int:
    cur = conn.execute(
        "INSERT INTO comments(report_id, content) VALUES(?, ?)",
        (report_id, content),
    )
    return int(cur.lastrowid)


def get_comment(conn: Connection, comment_id: int):
    return conn.execute(
        "SELECT id, report_id, content FROM comments WHERE id=?", (comment_id,)
    ).fetchone()


def list_for_reports(conn: Connection, report_ids: Iterable[int]):
    ids = list(report_ids)
    if not ids:
        return []
    q = "SELECT id, report_id, content FROM comments WHERE report_id IN ({}) ORDER BY id".format(
        ",".join(["?"] * len(ids))
    )
    return conn.execute(q, ids).fetchall()

