from __future__ import annotations

from typing import Any, Optional

import structlog

from salespro import validators
from salespro.constants import (
    AI_KEY_PREFIX,
    ATTENDANCE,
    ATTENDANCE_STATUSES,
    CRM,
    CRM_CATEGORIES,
    CRM_CLOSED,
    CRM_OPEN,
    CRM_STATUSES,
    ERROR_INVALID_AI_KEY,
    ERROR_INVALID_DATE,
    ERROR_INVALID_PHONE,
    ERROR_INVALID_PRICE,
    ERROR_INVALID_QUANTITY,
    ERROR_MISSING_PRODUCT,
    SALES,
    SETTINGS,
    SETTINGS_KEY,
    STATUS_PRESENT,
    TARGETS,
    THEMES,
)
from salespro.db.record_store import RecordStore
from salespro.errors import RecordNotFoundError, ValidationError
from salespro.models.attendance import Attendance
from salespro.models.crm_issue import CrmIssue
from salespro.models.sale import Sale
from salespro.models.settings import Settings, default_settings
from salespro.models.target import NUMERIC_FIELDS, Target

logger = structlog.get_logger(__name__)


def _check_date(value: Any) -> None:
    if not validators.iso_date(value):
        raise ValidationError(ERROR_INVALID_DATE, "date")


# =============================================================================
# SALE DATA ACCESS OBJECT
# =============================================================================

def validate_sale(sale: Sale) -> None:
    """Reject a sale before it reaches the store."""
    _check_date(sale.date)
    if not validators.nonempty(sale.product_name):
        raise ValidationError(ERROR_MISSING_PRODUCT, "product_name")
    if not validators.pos_float(sale.price):
        raise ValidationError(ERROR_INVALID_PRICE, "price")
    if not validators.pos_int(sale.quantity):
        raise ValidationError(ERROR_INVALID_QUANTITY, "quantity")
    if sale.customer_number and not validators.phone10(sale.customer_number):
        raise ValidationError(ERROR_INVALID_PHONE, "customer_number")


class SaleDAO:
    """
    Sales collection.
    Columns: id, date, timestamp, product_name, quantity, price, bill_image,
             bill_image_type, bill_id, bill_number, customer_number
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def add(self, sale: Sale) -> int:
        """Create new sale; returns the assigned id."""
        validate_sale(sale)
        rec = sale.to_record()
        rec.pop("id")
        return await self.store.create(SALES, rec)

    async def update(self, sale: Sale) -> None:
        """Full replacement of an existing sale."""
        if sale.id is None:
            raise ValidationError("Sale has no id", "id")
        validate_sale(sale)
        async with self.store.lock(SALES):
            if await self.store.get(SALES, sale.id) is None:
                raise RecordNotFoundError(SALES, sale.id)
            await self.store.put(SALES, sale.to_record())

    async def delete(self, sale_id: int) -> None:
        await self.store.delete(SALES, int(sale_id))

    async def get(self, sale_id: int) -> Optional[Sale]:
        r = await self.store.get(SALES, int(sale_id))
        return Sale.from_record(r) if r else None

    async def list(self) -> list[Sale]:
        """All sales, most recent first."""
        sales = [Sale.from_record(r) for r in await self.store.get_all(SALES)]
        sales.sort(key=lambda s: (s.timestamp, s.id or 0), reverse=True)
        return sales

    async def list_by_date(self, day: str) -> list[Sale]:
        rows = await self.store.get_by_index(SALES, "by-date", day)
        return [Sale.from_record(r) for r in rows]


# =============================================================================
# ATTENDANCE DATA ACCESS OBJECT
# =============================================================================

_ATTENDANCE_FIELDS = {"status", "time_in", "time_out", "location"}


def validate_attendance(attendance: Attendance) -> None:
    _check_date(attendance.date)
    _check_attendance_changes(attendance.to_record(), required=("status",))


def _check_attendance_changes(changes: dict[str, Any], required: tuple = ()) -> None:
    unknown = set(changes) - _ATTENDANCE_FIELDS - {"id", "date"}
    if unknown:
        raise ValidationError(f"Unknown attendance fields: {sorted(unknown)}")
    for name in required:
        if changes.get(name) is None:
            raise ValidationError(f"Attendance {name} is required", name)
    if "status" in changes and changes["status"] not in ATTENDANCE_STATUSES:
        raise ValidationError(f"Invalid attendance status: {changes['status']}", "status")
    for name in ("time_in", "time_out"):
        value = changes.get(name)
        if value is not None and not validators.hhmm(value):
            raise ValidationError(f"{name} must be HH:MM", name)


class AttendanceDAO:
    """
    Attendance collection, one record per date.
    Columns: id, date, status, time_in, time_out, location
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def _merge(self, day: str, changes: dict[str, Any]) -> Attendance:
        # caller holds the ATTENDANCE lock
        existing = await self.store.get_by_index(ATTENDANCE, "by-date", day)
        if existing:
            rec = {**existing[0], **changes}
            await self.store.put(ATTENDANCE, rec)
        else:
            if "status" not in changes:
                raise ValidationError("Attendance status is required", "status")
            rec = {"date": day, **changes}
            rec["id"] = await self.store.create(ATTENDANCE, rec)
        logger.info("attendance_marked", date=day, status=rec.get("status"), created=not existing)
        return Attendance.from_record(rec)

    async def mark_for_date(self, day: str, **changes: Any) -> Attendance:
        """
        Merge changes into the record for day, or create it.
        Fields not named in changes keep their stored values.
        """
        _check_date(day)
        if set(changes) & {"id", "date"}:
            raise ValidationError("id and date cannot be changed")
        _check_attendance_changes(changes)
        async with self.store.lock(ATTENDANCE):
            return await self._merge(day, changes)

    async def mark_present(self, day: str, clock: str, location: Optional[str] = None) -> Attendance:
        """
        Present at clock. The first check of the day sets time_in; every later
        one sets time_out and keeps the stored time_in.
        """
        _check_date(day)
        if not validators.hhmm(clock):
            raise ValidationError("Clock must be HH:MM", "time_in")
        async with self.store.lock(ATTENDANCE):
            existing = await self.store.get_by_index(ATTENDANCE, "by-date", day)
            checked_in = bool(existing and existing[0].get("time_in"))
            changes = {"status": STATUS_PRESENT, "time_out" if checked_in else "time_in": clock}
            if location is not None:
                changes["location"] = location
            return await self._merge(day, changes)

    async def get_for_date(self, day: str) -> Optional[Attendance]:
        rows = await self.store.get_by_index(ATTENDANCE, "by-date", day)
        return Attendance.from_record(rows[0]) if rows else None

    async def list(self) -> list[Attendance]:
        rows = await self.store.get_all(ATTENDANCE)
        return sorted((Attendance.from_record(r) for r in rows), key=lambda a: a.date)


# =============================================================================
# TARGET DATA ACCESS OBJECT
# =============================================================================

def validate_target(target: Target) -> None:
    _check_date(target.date)
    for name in NUMERIC_FIELDS:
        if not validators.nonneg_float(getattr(target, name)):
            raise ValidationError(f"{name} must be a non-negative number", name)


class TargetDAO:
    """
    Targets collection, one record per date, always written in full.
    Columns: id, date, day_target, day_achievement, week_target,
             week_achievement, eol_target, eol_achieve
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def save_for_date(self, target: Target) -> Target:
        """Replace the record for target.date, keeping its id, or create it."""
        validate_target(target)
        rec = target.to_record()
        async with self.store.lock(TARGETS):
            existing = await self.store.get_by_index(TARGETS, "by-date", target.date)
            if existing:
                rec["id"] = existing[0]["id"]
                await self.store.put(TARGETS, rec)
            else:
                rec.pop("id")
                rec["id"] = await self.store.create(TARGETS, rec)
        return Target.from_record(rec)

    async def get_for_date(self, day: str) -> Optional[Target]:
        rows = await self.store.get_by_index(TARGETS, "by-date", day)
        return Target.from_record(rows[0]) if rows else None

    async def list(self) -> list[Target]:
        rows = await self.store.get_all(TARGETS)
        return sorted((Target.from_record(r) for r in rows), key=lambda t: t.date)


# =============================================================================
# CRM DATA ACCESS OBJECT
# =============================================================================

def validate_crm_issue(issue: CrmIssue) -> None:
    _check_date(issue.date)
    if issue.category not in CRM_CATEGORIES:
        raise ValidationError(f"Invalid category: {issue.category}", "category")
    if issue.status not in CRM_STATUSES:
        raise ValidationError(f"Invalid status: {issue.status}", "status")
    if not validators.nonempty(issue.customer_name):
        raise ValidationError("Customer name is required", "customer_name")
    if not validators.phone10(issue.contact_number):
        raise ValidationError(ERROR_INVALID_PHONE, "contact_number")


class CrmDAO:
    """
    CRM issues collection, indexed by status.
    Columns: id, date, timestamp, category, customer_name, contact_number,
             product, message, status
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def add(self, issue: CrmIssue) -> int:
        validate_crm_issue(issue)
        rec = issue.to_record()
        rec.pop("id")
        return await self.store.create(CRM, rec)

    async def update(self, issue: CrmIssue) -> None:
        """Full replacement; used to flip Open/Closed."""
        if issue.id is None:
            raise ValidationError("Issue has no id", "id")
        validate_crm_issue(issue)
        async with self.store.lock(CRM):
            if await self.store.get(CRM, issue.id) is None:
                raise RecordNotFoundError(CRM, issue.id)
            await self.store.put(CRM, issue.to_record())

    async def set_status(self, issue_id: int, status: Optional[str] = None) -> CrmIssue:
        """Set status, or flip Open/Closed when status is None."""
        if status is not None and status not in CRM_STATUSES:
            raise ValidationError(f"Invalid status: {status}", "status")
        async with self.store.lock(CRM):
            r = await self.store.get(CRM, int(issue_id))
            if r is None:
                raise RecordNotFoundError(CRM, issue_id)
            if status is None:
                status = CRM_CLOSED if r["status"] == CRM_OPEN else CRM_OPEN
            r["status"] = status
            await self.store.put(CRM, r)
        return CrmIssue.from_record(r)

    async def toggle_status(self, issue_id: int) -> CrmIssue:
        return await self.set_status(issue_id)

    async def list(self) -> list[CrmIssue]:
        """All issues, newest first."""
        issues = [CrmIssue.from_record(r) for r in await self.store.get_all(CRM)]
        issues.sort(key=lambda i: (i.timestamp, i.id or 0), reverse=True)
        return issues

    async def list_by_status(self, status: str) -> list[CrmIssue]:
        rows = await self.store.get_by_index(CRM, "by-status", status)
        return [CrmIssue.from_record(r) for r in rows]


# =============================================================================
# SETTINGS DATA ACCESS OBJECT
# =============================================================================

def validate_settings_changes(changes: dict[str, Any]) -> None:
    unknown = set(changes) - (Settings.field_names() - {"id"})
    if unknown:
        raise ValidationError(f"Unknown settings fields: {sorted(unknown)}")
    key = changes.get("ai_api_key")
    if key and not str(key).startswith(AI_KEY_PREFIX):
        raise ValidationError(ERROR_INVALID_AI_KEY, "ai_api_key")
    if "theme" in changes and changes["theme"] not in THEMES:
        raise ValidationError(f"Invalid theme: {changes['theme']}", "theme")
    if "brand_target" in changes and not validators.nonneg_float(changes["brand_target"]):
        raise ValidationError("Brand target must be a non-negative number", "brand_target")
    if changes.get("store_lat") is not None and not validators.latitude(changes["store_lat"]):
        raise ValidationError("Latitude must be between -90 and 90", "store_lat")
    if changes.get("store_lng") is not None and not validators.longitude(changes["store_lng"]):
        raise ValidationError("Longitude must be between -180 and 180", "store_lng")


def validate_settings(settings: Settings) -> None:
    rec = settings.to_record()
    rec.pop("id")
    validate_settings_changes(rec)


class SettingsDAO:
    """Settings singleton stored under SETTINGS_KEY."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def load(self) -> Settings:
        """Return the stored settings, writing the defaults on first run."""
        async with self.store.lock(SETTINGS):
            r = await self.store.get(SETTINGS, SETTINGS_KEY)
            if r is None:
                settings = default_settings()
                await self.store.put(SETTINGS, settings.to_record())
                logger.info("settings_bootstrapped")
                return settings
        return Settings.from_record(r)

    async def update(self, **changes: Any) -> Settings:
        """Merge changes into the singleton and persist the result."""
        validate_settings_changes(changes)
        async with self.store.lock(SETTINGS):
            r = await self.store.get(SETTINGS, SETTINGS_KEY)
            current = Settings.from_record(r) if r else default_settings()
            rec = {**current.to_record(), **changes, "id": SETTINGS_KEY}
            updated = Settings.from_record(rec)
            await self.store.put(SETTINGS, updated.to_record())
        return updated
