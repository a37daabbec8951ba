from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from salespro.constants import DEFAULT_IMAGE_MIME
from salespro.utils import now_ms


@dataclass
class BillImage:
    data: bytes
    mime_type: str = DEFAULT_IMAGE_MIME


@dataclass
class Sale:
    date: str
    product_name: str
    quantity: int
    price: float
    timestamp: int = field(default_factory=now_ms)
    bill_image: Optional[BillImage] = None
    bill_id: Optional[str] = None
    bill_number: Optional[str] = None
    customer_number: Optional[str] = None
    id: Optional[int] = None

    @property
    def value(self) -> float:
        return self.quantity * self.price

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "timestamp": int(self.timestamp),
            "product_name": self.product_name,
            "quantity": int(self.quantity),
            "price": float(self.price),
            "bill_image": self.bill_image.data if self.bill_image else None,
            "bill_image_type": self.bill_image.mime_type if self.bill_image else None,
            "bill_id": self.bill_id,
            "bill_number": self.bill_number,
            "customer_number": self.customer_number,
        }

    @classmethod
    def from_record(cls, r: dict[str, Any]) -> "Sale":
        blob = r.get("bill_image")
        image = None
        if blob is not None:
            image = BillImage(bytes(blob), r.get("bill_image_type") or DEFAULT_IMAGE_MIME)
        return cls(
            id=int(r["id"]) if r.get("id") is not None else None,
            date=str(r["date"]),
            timestamp=int(r["timestamp"]),
            product_name=str(r["product_name"]),
            quantity=int(r["quantity"]),
            price=float(r["price"]),
            bill_image=image,
            bill_id=r.get("bill_id"),
            bill_number=r.get("bill_number"),
            customer_number=r.get("customer_number"),
        )
