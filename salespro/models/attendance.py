from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Attendance:
    date: str
    status: str
    time_in: Optional[str] = None
    time_out: Optional[str] = None
    location: Optional[str] = None
    id: Optional[int] = None

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "status": self.status,
            "time_in": self.time_in,
            "time_out": self.time_out,
            "location": self.location,
        }

    @classmethod
    def from_record(cls, r: dict[str, Any]) -> "Attendance":
        return cls(
            id=int(r["id"]) if r.get("id") is not None else None,
            date=str(r["date"]),
            status=str(r["status"]),
            time_in=r.get("time_in"),
            time_out=r.get("time_out"),
            location=r.get("location"),
        )
