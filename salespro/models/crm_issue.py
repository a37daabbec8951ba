from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from salespro.constants import CRM_OPEN
from salespro.utils import now_ms


@dataclass
class CrmIssue:
    date: str
    category: str
    customer_name: str
    contact_number: str
    product: str
    message: str
    status: str = CRM_OPEN
    timestamp: int = field(default_factory=now_ms)
    id: Optional[int] = None

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "timestamp": int(self.timestamp),
            "category": self.category,
            "customer_name": self.customer_name,
            "contact_number": self.contact_number,
            "product": self.product,
            "message": self.message,
            "status": self.status,
        }

    @classmethod
    def from_record(cls, r: dict[str, Any]) -> "CrmIssue":
        return cls(
            id=int(r["id"]) if r.get("id") is not None else None,
            date=str(r["date"]),
            timestamp=int(r["timestamp"]),
            category=str(r["category"]),
            customer_name=str(r.get("customer_name") or ""),
            contact_number=str(r.get("contact_number") or ""),
            product=str(r.get("product") or ""),
            message=str(r.get("message") or ""),
            status=str(r.get("status") or CRM_OPEN),
        )
