import os
import sys
import sqlite3
import datetime as dt
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


class FakeClock:
    """Settable clock; call it to read, advance() to move forward."""

    def __init__(self, start: dt.datetime):
        self.now = start

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs) -> dt.datetime:
        self.now = self.now + dt.timedelta(**kwargs)
        return self.now


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "phenomena_test.db"
    # Point the package at this temp DB
    os.environ["PHENOMENA_DB_PATH"] = str(path)
    schema = Path(_PROJECT_ROOT / "phenomena" / "schema.sql").read_text(encoding="utf-8")
    from phenomena.logs import ensure_log_schema
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(schema)
        ensure_log_schema(conn)
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Clean tables before each test for isolation
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("PHENOMENA_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in ("comments", "reports", "operation_log"):
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture()
def clock():
    return FakeClock(dt.datetime(2024, 3, 1, 12, 0, 0))


@pytest.fixture()
def conn(tmp_db_path):
    from phenomena.db import get_conn
    with get_conn() as c:
        yield c


@pytest.fixture()
def store(conn, clock):
    from phenomena.services.report_store import ReportStore
    return ReportStore(conn, clock=clock)
