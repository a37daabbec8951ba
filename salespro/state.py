"""
In-memory mirror of the store that every surface reads from.

Each mutation writes through a DAO and then reloads the affected collection
before returning, so the next read sees exactly what is on disk. When a write
raises, the reload is skipped and the cached values stay as they were.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import structlog

from salespro.constants import CRM_OPEN
from salespro.db.dao import AttendanceDAO, CrmDAO, SaleDAO, SettingsDAO, TargetDAO
from salespro.db.record_store import RecordStore
from salespro.models.attendance import Attendance
from salespro.models.crm_issue import CrmIssue
from salespro.models.sale import Sale
from salespro.models.settings import Settings
from salespro.models.target import Target
from salespro.services.backup_service import BackupService

logger = structlog.get_logger(__name__)


class AppState:
    def __init__(self, store: RecordStore):
        self.store = store
        self.sales_dao = SaleDAO(store)
        self.attendance_dao = AttendanceDAO(store)
        self.targets_dao = TargetDAO(store)
        self.crm_dao = CrmDAO(store)
        self.settings_dao = SettingsDAO(store)
        self.backup = BackupService(store)

        self.settings: Optional[Settings] = None
        self.is_initialized = False
        self.sales: list[Sale] = []
        self.attendance: list[Attendance] = []
        self.targets: list[Target] = []
        self.crm_issues: list[CrmIssue] = []

    async def initialize(self) -> None:
        await self.reload_all()

    async def reload_all(self) -> None:
        await self.load_settings()
        await self.load_sales()
        await self.load_attendance()
        await self.load_targets()
        await self.load_crm_issues()

    # ---- Settings ----
    async def load_settings(self) -> Settings:
        self.settings = await self.settings_dao.load()
        self.is_initialized = True
        return self.settings

    async def update_settings(self, **changes: Any) -> Settings:
        await self.settings_dao.update(**changes)
        return await self.load_settings()

    # ---- Sales ----
    async def load_sales(self) -> list[Sale]:
        self.sales = await self.sales_dao.list()
        return self.sales

    async def add_sale(self, sale: Sale) -> int:
        sale_id = await self.sales_dao.add(sale)
        await self.load_sales()
        return sale_id

    async def update_sale(self, sale: Sale) -> None:
        await self.sales_dao.update(sale)
        await self.load_sales()

    async def delete_sale(self, sale_id: int) -> None:
        await self.sales_dao.delete(sale_id)
        await self.load_sales()

    # ---- Attendance ----
    async def load_attendance(self) -> list[Attendance]:
        self.attendance = await self.attendance_dao.list()
        return self.attendance

    async def mark_attendance(self, day: str, **changes: Any) -> Attendance:
        record = await self.attendance_dao.mark_for_date(day, **changes)
        await self.load_attendance()
        return record

    async def mark_present(self, day: str, clock: str, location: Optional[str] = None) -> Attendance:
        record = await self.attendance_dao.mark_present(day, clock, location)
        await self.load_attendance()
        return record

    # ---- Targets ----
    async def load_targets(self) -> list[Target]:
        self.targets = await self.targets_dao.list()
        return self.targets

    async def save_target(self, target: Target) -> Target:
        saved = await self.targets_dao.save_for_date(target)
        await self.load_targets()
        return saved

    # ---- CRM ----
    async def load_crm_issues(self) -> list[CrmIssue]:
        self.crm_issues = await self.crm_dao.list()
        return self.crm_issues

    async def add_crm_issue(self, issue: CrmIssue) -> int:
        issue_id = await self.crm_dao.add(issue)
        await self.load_crm_issues()
        return issue_id

    async def update_crm_issue(self, issue: CrmIssue) -> None:
        await self.crm_dao.update(issue)
        await self.load_crm_issues()

    async def toggle_crm_status(self, issue_id: int) -> CrmIssue:
        issue = await self.crm_dao.toggle_status(issue_id)
        await self.load_crm_issues()
        return issue

    # ---- Backup ----
    async def import_backup(self, source: str | Path | dict) -> dict[str, int]:
        """
        Destructive restore of every collection, then a full reload.
        A failed restore is rolled back, so the cache is left untouched.
        """
        restored = await self.backup.import_backup(source)
        await self.reload_all()
        return restored

    # ---- Reads ----
    def sale_by_id(self, sale_id: int) -> Optional[Sale]:
        return next((s for s in self.sales if s.id == sale_id), None)

    def sales_for_date(self, day: str) -> list[Sale]:
        return [s for s in self.sales if s.date == day]

    def attendance_for_date(self, day: str) -> Optional[Attendance]:
        return next((a for a in self.attendance if a.date == day), None)

    def target_for_date(self, day: str) -> Optional[Target]:
        return next((t for t in self.targets if t.date == day), None)

    def open_crm_issues(self) -> list[CrmIssue]:
        return [i for i in self.crm_issues if i.status == CRM_OPEN]
