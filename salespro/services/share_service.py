"""
Plain-text reports for sharing through a messaging app link.
Nothing here touches the store; callers pass in state snapshots.
"""
from __future__ import annotations

from datetime import date
from typing import Sequence
from urllib.parse import quote

from salespro.models.sale import Sale
from salespro.models.settings import Settings
from salespro.models.target import Target
from salespro.services.aggregation import family_quantities, month_to_date_total, sales_for_day, totals
from salespro.utils import format_inr

WHATSAPP_URL = "https://wa.me/?text="


def _qty(value: int) -> str:
    return str(value).zfill(2)


def plain_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def whatsapp_link(message: str) -> str:
    return WHATSAPP_URL + quote(message, safe="")


def daily_sales_message(settings: Settings, sales: Sequence[Sale], day: date) -> str:
    """End-of-day summary: today's value and quantity, per-family quantities, month to date."""
    today = sales_for_day(sales, day.isoformat())
    day_totals = totals(today)
    lines = [
        f"Name: {settings.user_name}",
        f"Date: {day.strftime('%d/%m/%Y')}",
        f"Store Location: {settings.store_location}",
        f"Today's Sale Value: {format_inr(day_totals.value)}",
        f"Today's Sale Qty: {day_totals.quantity}",
    ]
    lines += [f"{label} Qty: {_qty(qty)}" for label, qty in family_quantities(today)]
    lines.append(f"MTD Sale Value: {format_inr(month_to_date_total(sales, day))}")
    lines += ["", "I checked out sir."]
    return "\n".join(lines)


def attendance_message(settings: Settings, day: date) -> str:
    return "\n".join([
        f"Name: {settings.user_name}",
        f"Store: {settings.store_name or ''}",
        f"Location: {settings.store_location or ''}",
        f"Date: {day.strftime('%d/%m/%Y')}",
        "I am in the store sir.",
    ])


def target_message(settings: Settings, target: Target, brand: str = "BAJAJ") -> str:
    day = date.fromisoformat(target.date)
    return "\n".join([
        f"Date: {day.strftime('%d-%m-%Y')}",
        f"Name: {settings.user_name}",
        f"Brand: *{brand}*",
        f"Day Target: {plain_number(target.day_target)}",
        f"Day Achievement: {plain_number(target.day_achievement)}",
        f"Week Target: {plain_number(target.week_target)}",
        f"Week Achievement: {plain_number(target.week_achievement)}",
        f"EOL Target: {plain_number(target.eol_target)}",
        f"EOL Achievement: {plain_number(target.eol_achieve)}",
    ])
