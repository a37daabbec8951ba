"""
Derived views over state snapshots: month-to-date totals, per-day rollups,
product-family quantities, week windows.

Pure functions. Dates are compared as YYYY-MM-DD strings, which order the
same way as the calendar and never shift with the local timezone.
"""
from __future__ import annotations

import calendar
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Sequence

from salespro.constants import PRODUCT_FAMILIES
from salespro.models.attendance import Attendance
from salespro.models.sale import Sale


@dataclass(frozen=True)
class DayTotals:
    value: float
    quantity: int
    count: int


def month_bounds(reference: date) -> tuple[date, date]:
    last_day = calendar.monthrange(reference.year, reference.month)[1]
    return reference.replace(day=1), reference.replace(day=last_day)


def week_window(day: date) -> tuple[date, date]:
    """Monday..Sunday week containing day."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def filter_sales_by_range(sales: Iterable[Sale], start: str, end: str) -> list[Sale]:
    """Sales whose date lies in [start, end], both inclusive."""
    return [s for s in sales if start <= s.date <= end]


def month_to_date_total(sales: Iterable[Sale], reference: date) -> float:
    start, end = month_bounds(reference)
    return sum(s.value for s in filter_sales_by_range(sales, start.isoformat(), end.isoformat()))


def sales_by_day(sales: Iterable[Sale]) -> dict[str, list[Sale]]:
    grouped: dict[str, list[Sale]] = defaultdict(list)
    for s in sales:
        grouped[s.date].append(s)
    return dict(grouped)


def sales_for_day(sales: Iterable[Sale], day: str) -> list[Sale]:
    return [s for s in sales if s.date == day]


def totals(sales: Iterable[Sale]) -> DayTotals:
    value = 0.0
    quantity = 0
    count = 0
    for s in sales:
        value += s.value
        quantity += s.quantity
        count += 1
    return DayTotals(value, quantity, count)


def daily_values(sales: Iterable[Sale], reference: date) -> dict[str, float]:
    """Sale value for every day of the reference month (zero when nothing sold)."""
    start, end = month_bounds(reference)
    series = {
        (start + timedelta(days=i)).isoformat(): 0.0
        for i in range((end - start).days + 1)
    }
    for s in sales:
        if s.date in series:
            series[s.date] += s.value
    return series


def keyword_quantity(sales: Iterable[Sale], keywords: Sequence[str]) -> int:
    """Sum of quantities of sales whose product name contains any keyword (case-insensitive)."""
    needles = [k.lower() for k in keywords]
    return sum(
        s.quantity
        for s in sales
        if any(k in s.product_name.lower() for k in needles)
    )


def family_quantities(
    sales: Sequence[Sale],
    families: Sequence[tuple[str, Sequence[str]]] = PRODUCT_FAMILIES,
) -> list[tuple[str, int]]:
    """
    Per-family quantities in table order.
    A sale matching several families counts towards each of them.
    """
    return [(label, keyword_quantity(sales, keywords)) for label, keywords in families]


def attendance_status_counts(records: Iterable[Attendance], reference: date) -> Counter:
    start, end = month_bounds(reference)
    lo, hi = start.isoformat(), end.isoformat()
    return Counter(r.status for r in records if lo <= r.date <= hi)


def suggested_day_target(week_target: float) -> int:
    return round(week_target / 7)
