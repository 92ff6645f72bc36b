"""
Rebuild the phenomena database, load sample data and run a smoke check.

WARNING: This DROPS the reports, comments and operation_log tables.

Usage:
  python -m phenomena.scripts.init_db [--db path/to/phenomena.db] [--skip-checks]
"""
from __future__ import annotations

import argparse
import logging
import sqlite3
import sys

from phenomena.db import get_conn
from phenomena.errors import ReportError
from phenomena.services.report_store import ReportStore
from phenomena.scripts.seed_data import rebuild_db, seed_db, test_db

logger = logging.getLogger("phenomena.init_db")


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--db", default=None, help="database path (defaults to the configured one)")
    ap.add_argument("--skip-checks", action="store_true", help="do not run the smoke check")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        with get_conn(args.db) as conn:
            rebuild_db(conn)
            store = ReportStore(conn)
            res = seed_db(store)
            if not args.skip_checks:
                test_db(store)
    except (ReportError, sqlite3.Error, OSError, ValueError):
        logger.exception("database setup failed")
        return 1
    print({"message": "ok", **res})
    return 0


if __name__ == "__main__":
    sys.exit(main())
