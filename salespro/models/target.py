from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

NUMERIC_FIELDS = (
    "day_target",
    "day_achievement",
    "week_target",
    "week_achievement",
    "eol_target",
    "eol_achieve",
)


@dataclass
class Target:
    date: str
    day_target: float = 0.0
    day_achievement: float = 0.0
    week_target: float = 0.0
    week_achievement: float = 0.0
    eol_target: float = 0.0
    eol_achieve: float = 0.0
    id: Optional[int] = None

    def to_record(self) -> dict[str, Any]:
        rec: dict[str, Any] = {"id": self.id, "date": self.date}
        for name in NUMERIC_FIELDS:
            rec[name] = float(getattr(self, name))
        return rec

    @classmethod
    def from_record(cls, r: dict[str, Any]) -> "Target":
        return cls(
            id=int(r["id"]) if r.get("id") is not None else None,
            date=str(r["date"]),
            **{name: float(r.get(name) or 0) for name in NUMERIC_FIELDS},
        )
