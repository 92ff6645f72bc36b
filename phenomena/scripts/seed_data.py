"""
Schema rebuild, sample data and a smoke run of every store operation.

Used by ``phenomena.scripts.init_db``; each step takes the connection (or a
store built on it) explicitly.
"""
from __future__ import annotations

import logging
from pathlib import Path
from sqlite3 import Connection

from ..logs import ensure_log_schema
from ..services.report_store import ReportStore

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schema.sql"

SAMPLE_REPORTS = [
    {
        "title": "Floating orbs over the reservoir",
        "location": "Lake Pleasant, AZ",
        "description": "Three amber lights hovered over the water for ten minutes.",
        "password": "orbs123",
    },
    {
        "title": "Footprints that stop mid-trail",
        "location": "Olympic National Forest, WA",
        "description": "A line of bare footprints in fresh snow that simply ends.",
        "password": "tracks",
    },
    {
        "title": "Radio picks up a voice counting backwards",
        "location": "Marfa, TX",
        "description": "Every night at 3am on 1470 AM.",
        "password": "static",
    },
]

SAMPLE_COMMENTS = [
    (0, "Saw the same thing last Tuesday."),
    (0, "Probably drones, but still."),
    (1, "Was it near the ranger station?"),
]


def rebuild_db(conn: Connection) -> None:
    """Drop every table and recreate them from schema.sql."""
    logger.info("rebuilding schema from %s", SCHEMA_PATH)
    conn.executescript(
        """
        DROP TABLE IF EXISTS comments;
        DROP TABLE IF EXISTS reports;
        DROP TABLE IF EXISTS operation_log;
        """
    )
    conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
    ensure_log_schema(conn)


def seed_db(store: ReportStore) -> dict:
    """Create sample reports and comments, then close the last report."""
    report_ids = []
    for fields in SAMPLE_REPORTS:
        report = store.create_report(**fields).unwrap()
        report_ids.append(report.id)
    for idx, content in SAMPLE_COMMENTS:
        store.create_report_comment(report_ids[idx], content).unwrap()
    last = SAMPLE_REPORTS[-1]
    store.close_report(report_ids[-1], last["password"]).unwrap()
    logger.info("seeded %d reports, %d comments", len(report_ids), len(SAMPLE_COMMENTS))
    return {"reports": len(report_ids), "comments": len(SAMPLE_COMMENTS)}


def test_db(store: ReportStore) -> None:
    """Exercise each store operation against the seeded data and print the outcome."""
    print("Calling list_open_reports")
    reports = store.list_open_reports().unwrap()
    for r in reports:
        print(r.to_dict())

    print("Calling create_report")
    report = store.create_report(
        title="Humming from the old mill",
        location="Lowell, MA",
        description="Low hum, no machinery running.",
        password="hum",
    ).unwrap()
    print(report.to_dict())

    print("Calling create_report_comment")
    comment = store.create_report_comment(report.id, "Heard it too.").unwrap()
    print(comment.to_dict())

    print("Calling close_report with a wrong password")
    res = store.close_report(report.id, "not-it")
    print({"ok": res.ok, "kind": getattr(res, "kind", None)})

    print("Calling close_report")
    print(store.close_report(report.id, "hum").unwrap())

    print("Calling create_report_comment on a closed report")
    res = store.create_report_comment(report.id, "Too late?")
    print({"ok": res.ok, "kind": getattr(res, "kind", None)})
