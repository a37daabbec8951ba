from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import structlog

from salespro.config import APP_NAME, APP_VERSION, DB_PATH
from salespro.constants import (
    ATTENDANCE_STATUSES,
    CRM_CATEGORIES,
    DEFAULT_IMAGE_MIME,
    ERROR_INVALID_DATE,
    STATUS_PRESENT,
)
from salespro.db.database import Database
from salespro.db.record_store import RecordStore
from salespro.errors import SalesProError, ValidationError
from salespro.logging import setup_logging
from salespro.models.crm_issue import CrmIssue
from salespro.models.sale import BillImage, Sale
from salespro.models.target import Target
from salespro.services import aggregation, share_service
from salespro.services.assistant_service import AssistantService
from salespro.services.attendance_service import AttendanceService
from salespro.services.auth_service import AuthService
from salespro.services.geofence import Coordinate
from salespro.services.geolocation import StaticLocationProvider
from salespro.services.ocr_service import BillScanService, TesseractRecognizer
from salespro.services.report_service import ReportService
from salespro.state import AppState
from salespro.utils import money, today_str

logger = structlog.get_logger(__name__)


def init_db(db: Database) -> None:
    db.connect()
    db.initialize_schema()


def _day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(ERROR_INVALID_DATE, "date") from None


def _position(args) -> Optional[Coordinate]:
    if args.lat is None or args.lng is None:
        return None
    return Coordinate(args.lat, args.lng)


# ---------------- Commands ----------------
async def cmd_init(state: AppState, args) -> None:
    print(f"{APP_NAME} v{APP_VERSION} ready ({state.store.db.db_path})")


async def cmd_login(state: AppState, args) -> None:
    auth = AuthService(state)
    if not await auth.login(args.name, args.emp_id, args.store_location, args.store_name):
        raise ValidationError(auth.get_last_error())
    print(f"Logged in as {state.settings.user_name}")


async def cmd_logout(state: AppState, args) -> None:
    await AuthService(state).logout()
    print("Logged out")


async def cmd_theme(state: AppState, args) -> None:
    print(f"Theme: {await AuthService(state).toggle_theme()}")


def _bill_scanner() -> BillScanService:
    return BillScanService(TesseractRecognizer())


async def cmd_add_sale(state: AppState, args) -> None:
    image = None
    if args.bill_image:
        path = Path(args.bill_image)
        mime = mimetypes.guess_type(path.name)[0] or DEFAULT_IMAGE_MIME
        image = BillImage(path.read_bytes(), mime)
    product = args.product
    if not product and image is not None:
        product = await _bill_scanner().guess_product(image)
        if product:
            print(f"Product read from bill: {product}")
    sale = Sale(
        date=args.date,
        product_name=product or "",
        quantity=args.qty,
        price=args.price,
        bill_image=image,
        bill_id=args.bill_id,
        bill_number=args.bill_number,
        customer_number=args.customer,
    )
    sale_id = await state.add_sale(sale)
    print(f"Sale #{sale_id} saved: {sale.quantity} x {sale.product_name} = {money(sale.value)}")


async def cmd_list_sales(state: AppState, args) -> None:
    rows = state.sales_for_date(args.date) if args.date else state.sales
    for s in rows:
        flag = " [bill]" if s.bill_image else ""
        print(f"#{s.id:<5} {s.date}  {s.product_name:<35} {s.quantity:>3} x {money(s.price):>12}{flag}")
    print(f"{len(rows)} sale(s), total {money(aggregation.totals(rows).value)}")


async def cmd_delete_sale(state: AppState, args) -> None:
    await state.delete_sale(args.id)
    print(f"Sale #{args.id} deleted")


async def cmd_attendance(state: AppState, args) -> None:
    service = AttendanceService(state, StaticLocationProvider(_position(args)))
    if args.status == STATUS_PRESENT:
        record = await service.mark_present(args.date)
    else:
        record = await service.mark_absence(args.date, args.status)
    print(
        f"{record.date}: {record.status}"
        f"  in={record.time_in or '-'} out={record.time_out or '-'}"
        f"  {record.location or ''}".rstrip()
    )


async def cmd_map_store(state: AppState, args) -> None:
    point = await AttendanceService(state, StaticLocationProvider(_position(args))).map_store_location()
    print(f"Store location mapped: {point.label()}")


async def cmd_target(state: AppState, args) -> None:
    day_target = args.day_target
    if day_target is None:
        day_target = aggregation.suggested_day_target(args.week_target)
    target = Target(
        date=args.date,
        day_target=day_target,
        day_achievement=args.day_achievement,
        week_target=args.week_target,
        week_achievement=args.week_achievement,
        eol_target=args.eol_target,
        eol_achieve=args.eol_achieve,
    )
    saved = await state.save_target(target)
    print(f"Target saved for {saved.date} (day target {share_service.plain_number(saved.day_target)})")


async def cmd_crm_add(state: AppState, args) -> None:
    issue = CrmIssue(
        date=args.date,
        category=args.category,
        customer_name=args.customer,
        contact_number=args.contact,
        product=args.product,
        message=args.message,
    )
    issue_id = await state.add_crm_issue(issue)
    print(f"Issue #{issue_id} logged ({issue.category})")


async def cmd_crm_toggle(state: AppState, args) -> None:
    issue = await state.toggle_crm_status(args.id)
    print(f"Issue #{issue.id} is now {issue.status}")


async def cmd_summary(state: AppState, args) -> None:
    day = _day(args.date)
    today = aggregation.totals(aggregation.sales_for_day(state.sales, args.date))
    mtd = aggregation.month_to_date_total(state.sales, day)
    brand_target = state.settings.brand_target
    counts = aggregation.attendance_status_counts(state.attendance, day)
    monday, sunday = aggregation.week_window(day)
    week = aggregation.totals(
        aggregation.filter_sales_by_range(state.sales, monday.isoformat(), sunday.isoformat())
    )
    print(f"Date:          {args.date}")
    print(f"Today:         {money(today.value)} ({today.quantity} pcs, {today.count} sales)")
    print(f"Week:          {money(week.value)} ({monday.isoformat()} to {sunday.isoformat()})")
    print(f"Month to date: {money(mtd)} of {money(brand_target)}")
    print("Attendance:    " + ", ".join(f"{s} {counts.get(s, 0)}" for s in ATTENDANCE_STATUSES))
    print(f"Open issues:   {len(state.open_crm_issues())}")


async def cmd_share(state: AppState, args) -> None:
    day = _day(args.date)
    if args.kind == "sales":
        message = share_service.daily_sales_message(state.settings, state.sales, day)
    elif args.kind == "attendance":
        message = share_service.attendance_message(state.settings, day)
    else:
        target = state.target_for_date(args.date)
        if target is None:
            raise ValidationError(f"No target saved for {args.date}", "date")
        message = share_service.target_message(state.settings, target)
    print(message)
    print()
    print(share_service.whatsapp_link(message))


async def cmd_export(state: AppState, args) -> None:
    path = await state.backup.export_backup(Path(args.out) if args.out else None)
    print(f"Backup written to {path}")


async def cmd_import(state: AppState, args) -> None:
    restored = await state.import_backup(Path(args.path))
    print("Restored: " + ", ".join(f"{name} {count}" for name, count in restored.items()))


async def cmd_report(state: AppState, args) -> None:
    service = ReportService(state)
    out = Path(args.out) if args.out else None
    if args.format == "xlsx":
        path = service.export_excel(args.start, args.end, out)
    else:
        path = service.export_pdf(args.start, args.end, out)
    print(f"Report written to {path}")


async def cmd_ask(state: AppState, args) -> None:
    reply = await AssistantService(state).ask(args.prompt, args.mode)
    print(reply.text)


# ---------------- Parser ----------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="salespro", description=f"{APP_NAME} field-sales records")
    parser.add_argument("--db", type=Path, default=DB_PATH, help="SQLite database file")
    sub = parser.add_subparsers(dest="command", required=True)

    def command(name: str, handler, help_text: str) -> argparse.ArgumentParser:
        p = sub.add_parser(name, help=help_text)
        p.set_defaults(handler=handler)
        return p

    def dated(p: argparse.ArgumentParser) -> None:
        p.add_argument("--date", default=today_str(), help="YYYY-MM-DD (default: today)")

    def located(p: argparse.ArgumentParser) -> None:
        p.add_argument("--lat", type=float)
        p.add_argument("--lng", type=float)

    command("init", cmd_init, "create the database and default settings")

    p = command("login", cmd_login, "fill in the profile and log in")
    p.add_argument("--name", required=True)
    p.add_argument("--emp-id", required=True)
    p.add_argument("--store-location", required=True)
    p.add_argument("--store-name")

    command("logout", cmd_logout, "log out (profile is kept)")
    command("theme", cmd_theme, "toggle dark/light theme")

    p = command("add-sale", cmd_add_sale, "record a sale")
    p.add_argument("--product", help="catalog name; read from --bill-image when omitted")
    p.add_argument("--qty", type=int, default=1)
    p.add_argument("--price", type=float, required=True)
    p.add_argument("--bill-id")
    p.add_argument("--bill-number")
    p.add_argument("--customer", help="10-digit customer phone number")
    p.add_argument("--bill-image", help="path to a photo of the bill")
    dated(p)

    p = command("list-sales", cmd_list_sales, "list sales, newest first")
    p.add_argument("--date")

    p = command("delete-sale", cmd_delete_sale, "delete a sale by id")
    p.add_argument("id", type=int)

    p = command("attendance", cmd_attendance, "mark attendance")
    p.add_argument("status", choices=ATTENDANCE_STATUSES)
    dated(p)
    located(p)

    p = command("map-store", cmd_map_store, "save the store's coordinates")
    located(p)

    p = command("target", cmd_target, "save the targets for a date")
    dated(p)
    p.add_argument("--day-target", type=float, help="default: week target / 7")
    p.add_argument("--day-achievement", type=float, default=0.0)
    p.add_argument("--week-target", type=float, default=0.0)
    p.add_argument("--week-achievement", type=float, default=0.0)
    p.add_argument("--eol-target", type=float, default=0.0)
    p.add_argument("--eol-achieve", type=float, default=0.0)

    p = command("crm-add", cmd_crm_add, "log a customer issue")
    p.add_argument("--category", choices=CRM_CATEGORIES, required=True)
    p.add_argument("--customer", required=True)
    p.add_argument("--contact", required=True)
    p.add_argument("--product", default="")
    p.add_argument("--message", default="")
    dated(p)

    p = command("crm-toggle", cmd_crm_toggle, "flip an issue between Open and Closed")
    p.add_argument("id", type=int)

    p = command("summary", cmd_summary, "today, week and month-to-date figures")
    dated(p)

    p = command("share", cmd_share, "print a shareable message and its link")
    p.add_argument("kind", choices=["sales", "attendance", "target"])
    dated(p)

    p = command("export", cmd_export, "write a JSON backup")
    p.add_argument("--out")

    p = command("import", cmd_import, "replace ALL data with a JSON backup")
    p.add_argument("path")

    p = command("report", cmd_report, "sales report for a period")
    p.add_argument("start")
    p.add_argument("end")
    p.add_argument("--format", choices=["pdf", "xlsx"], default="pdf")
    p.add_argument("--out")

    p = command("ask", cmd_ask, "ask the assistant")
    p.add_argument("prompt")
    p.add_argument("--mode", choices=["sales", "support"], default="sales")

    return parser


async def run(args, db: Database) -> None:
    state = AppState(RecordStore(db))
    await state.initialize()
    await args.handler(state, args)


def main(argv: Optional[list[str]] = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    db = Database(args.db)
    try:
        init_db(db)
        asyncio.run(run(args, db))
    except SalesProError as exc:
        logger.error("command_failed", command=args.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        db.disconnect()
    return 0


if __name__ == "__main__":
    sys.exit(main())
