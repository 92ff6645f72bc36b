from __future__ import annotations

from sqlite3 import Connection

# every column except password
PUBLIC_COLUMNS = "id, title, location, description, is_open, expiration_date"


def insert_report(
    conn: Connection,
    title: str,
    location: str,
    description: str,
    password: str,
    expiration_date: str,
) -> int:
    cur = conn.execute(
        "INSERT INTO reports(title, location, description, password, expiration_date) "
        "VALUES(?,?,?,?,?)",
        (title, location, description, password, expiration_date),
    )
    return int(cur.lastrowid)


def get_report(conn: Connection, report_id):
    """Full row including password. Internal to close/comment checks only."""
    return conn.execute(
        "SELECT id, title, location, description, password, is_open, expiration_date "
        "FROM reports WHERE id=?",
        (report_id,),
    ).fetchone()


def get_public(conn: Connection, report_id):
    return conn.execute(
        f"SELECT {PUBLIC_COLUMNS} FROM reports WHERE id=?", (report_id,)
    ).fetchone()


def list_open(conn: Connection):
    return conn.execute(
        f"SELECT {PUBLIC_COLUMNS} FROM reports WHERE is_open=1 ORDER BY id"
    ).fetchall()


def close_if_open(conn: Connection, report_id) -> bool:
    """Conditional close; False when the row was not open anymore."""
    cur = conn.execute(
        "UPDATE reports SET is_open=0 WHERE id=? AND is_open=1", (report_id,)
    )
    return cur.rowcount == 1


def set_expiration(conn: Connection, report_id, expiration_date: str) -> None:
    conn.execute(
        "UPDATE reports SET expiration_date=? WHERE id=?",
        (expiration_date, report_id),
    )
