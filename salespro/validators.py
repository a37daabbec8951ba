from __future__ import annotations

import re
from datetime import date
from typing import Any

_PHONE = re.compile(r"^\d{10}$")
_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def nonempty(s: Any) -> bool:
    return bool(s and str(s).strip())

def pos_int(s: Any) -> bool:
    try:
        return int(s) > 0 and float(s) == int(s)
    except (TypeError, ValueError):
        return False

def pos_float(s: Any) -> bool:
    try:
        return float(s) > 0
    except (TypeError, ValueError):
        return False

def nonneg_float(s: Any) -> bool:
    try:
        return float(s) >= 0
    except (TypeError, ValueError):
        return False

def iso_date(s: Any) -> bool:
    if not isinstance(s, str) or len(s) != 10:
        return False
    try:
        date.fromisoformat(s)
    except ValueError:
        return False
    return True

def phone10(s: Any) -> bool:
    return isinstance(s, str) and bool(_PHONE.match(s))

def hhmm(s: Any) -> bool:
    return isinstance(s, str) and bool(_HHMM.match(s))

def latitude(v: Any) -> bool:
    try:
        return -90.0 <= float(v) <= 90.0
    except (TypeError, ValueError):
        return False

def longitude(v: Any) -> bool:
    try:
        return -180.0 <= float(v) <= 180.0
    except (TypeError, ValueError):
        return False
