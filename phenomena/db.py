from __future__ import annotations

# phenomena/db.py
import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator
import os
import yaml

logger = logging.getLogger(__name__)

# DB path resolution order:
# 1) env PHENOMENA_DB_PATH (highest priority)
# 2) env DATABASE_URL (sqlite:///path or a bare path)
# 3) config.yaml test_db_path (when running under tests)
# 4) config.yaml db_path
# 5) fallback: phenomena-dev.db at the project root
# Relative paths from config.yaml are taken from the project root.
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_DEV_DB = os.path.join(_PROJECT_ROOT, "phenomena-dev.db")
_SQLITE_PREFIX = "sqlite:///"
_CONFIG_KEYS = ("db_path", "test_db_path")


def load_config() -> dict[str, str]:
    """Read the database paths from config.yaml; a missing or broken file yields {}."""
    cfg_path = os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("ignoring unreadable %s: %s", cfg_path, e)
        return {}
    if not isinstance(raw, dict):
        return {}
    out = {}
    for key in _CONFIG_KEYS:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            out[key] = os.path.join(_PROJECT_ROOT, value.strip())
    return out


def _path_from_url(url: str) -> str:
    url = url.strip()
    if url.startswith(_SQLITE_PREFIX):
        return url[len(_SQLITE_PREFIX):]
    if "://" in url:
        raise ValueError(f"unsupported DATABASE_URL scheme: {url.split('://', 1)[0]}")
    return url


def get_db_path() -> str:
    env_path = os.environ.get("PHENOMENA_DB_PATH")
    env_url = os.environ.get("DATABASE_URL")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif env_url:
        path = _path_from_url(env_url)
    else:
        cfg = load_config()
        if is_test and "test_db_path" in cfg:
            path = cfg["test_db_path"]
        else:
            path = cfg.get("db_path", _DEV_DB)

    if path != ":memory:":
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    return path


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Open a SQLite connection in autocommit mode, with foreign keys on and
    sqlite3.Row rows. An explicit db_path wins over get_db_path().
    """
    conn = sqlite3.connect(db_path or get_db_path(), isolation_level=None)
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Run a block inside BEGIN IMMEDIATE. On any error, including a failed
    COMMIT, the transaction is rolled back so the connection is left idle.
    """
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
        conn.commit()
    except BaseException:
        if conn.in_transaction:
            conn.rollback()
        raise
