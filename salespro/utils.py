from __future__ import annotations

import re
import time
from datetime import date, datetime
from typing import Any

# ---------------- Clock helpers ----------------
def now_ms() -> int:
    return int(time.time() * 1000)

def today_str() -> str:
    return date.today().isoformat()

def clock_hhmm(moment: datetime | None = None) -> str:
    return (moment or datetime.now()).strftime("%H:%M")


# ---------------- Money formatting ----------------
def format_inr(value: Any) -> str:
    """Indian digit grouping (12,34,567.5), at most two decimals, no trailing zeros."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        v = 0.0
    sign = "-" if v < 0 else ""
    whole, frac = f"{abs(v):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups: list[str] = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    frac = frac.rstrip("0")
    return f"{sign}{whole}.{frac}" if frac else f"{sign}{whole}"

def money(value: Any) -> str:
    return f"₹{format_inr(value)}"


# ---------------- Field-name casing (backup documents use camelCase) ----------------
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)

def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()
