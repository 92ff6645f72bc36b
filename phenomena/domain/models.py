from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, List

from .report_rules import format_ts, parse_ts


@dataclass(frozen=True)
class Comment:
    id: int
    report_id: int
    content: str

    @classmethod
    def from_row(cls, row) -> "Comment":
        return cls(id=int(row["id"]), report_id=int(row["report_id"]), content=row["content"])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Report:
    """Public view of a report. Never carries the password."""
    id: int
    title: str
    location: str
    description: str
    is_open: bool
    expiration_date: dt.datetime

    @classmethod
    def from_row(cls, row) -> "Report":
        return cls(
            id=int(row["id"]),
            title=row["title"],
            location=row["location"],
            description=row["description"],
            is_open=bool(row["is_open"]),
            expiration_date=parse_ts(row["expiration_date"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "location": self.location,
            "description": self.description,
            "is_open": self.is_open,
            "expiration_date": format_ts(self.expiration_date),
        }


@dataclass(frozen=True)
class OpenReport(Report):
    comments: List[Comment] = field(default_factory=list)
    is_expired: bool = False

    @classmethod
    def from_row(cls, row, comments=None, is_expired: bool = False) -> "OpenReport":
        base = Report.from_row(row)
        return cls(
            **{f.name: getattr(base, f.name) for f in fields(Report)},
            comments=list(comments or []),
            is_expired=is_expired,
        )

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["comments"] = [c.to_dict() for c in self.comments]
        out["is_expired"] = self.is_expired
        return out
