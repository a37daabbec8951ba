from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import structlog

from salespro import validators
from salespro.config import APP_NAME, EXPORTS_DIR
from salespro.constants import ERROR_INVALID_DATE
from salespro.errors import ReportRenderError, ValidationError
from salespro.models.sale import Sale
from salespro.services.aggregation import DayTotals, filter_sales_by_range, totals
from salespro.state import AppState
from salespro.utils import format_inr

logger = structlog.get_logger(__name__)


def _report_money(value: Any) -> str:
    """
    Money formatter for PDF reports.
    Helvetica has no rupee glyph, so the amount is prefixed with 'Rs.'.
    """
    return f"Rs. {format_inr(value)}"


def _clip(text: str, limit: int = 40) -> str:
    return text[:limit] + "..." if len(text) > limit else text


@dataclass(frozen=True)
class SalesReport:
    start: str
    end: str
    user_name: str
    store: str
    sales: list[Sale]
    totals: DayTotals

    @property
    def file_stem(self) -> str:
        return f"Sales_Report_{self.start}_to_{self.end}"


class ReportService:
    """Period sales reports as PDF (reportlab) or Excel (openpyxl)."""

    def __init__(self, state: AppState, out_dir: Optional[Path] = None):
        self.state = state
        self.out_dir = Path(out_dir) if out_dir else EXPORTS_DIR

    def sales_in_range(self, start: str, end: str) -> list[Sale]:
        if not validators.iso_date(start):
            raise ValidationError(ERROR_INVALID_DATE, "start")
        if not validators.iso_date(end):
            raise ValidationError(ERROR_INVALID_DATE, "end")
        if start > end:
            raise ValidationError("Start date must not be after end date", "start")
        rows = filter_sales_by_range(self.state.sales, start, end)
        rows.sort(key=lambda s: (s.date, s.timestamp, s.id or 0))
        return rows

    def summarize(self, start: str, end: str) -> SalesReport:
        rows = self.sales_in_range(start, end)
        settings = self.state.settings
        return SalesReport(
            start=start,
            end=end,
            user_name=settings.user_name if settings else "",
            store=settings.store_location if settings else "",
            sales=rows,
            totals=totals(rows),
        )

    def _target(self, report: SalesReport, suffix: str, out_path: Optional[Path]) -> Path:
        path = Path(out_path) if out_path else self.out_dir / f"{report.file_stem}{suffix}"
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    # ── PDF ───────────────────────────────────────────────────────────────────
    def export_pdf(self, start: str, end: str, out_path: Optional[Path] = None) -> Path:
        """Build an A4 PDF report and return its path."""
        report = self.summarize(start, end)
        path = self._target(report, ".pdf", out_path)
        try:
            from reportlab.lib.pagesizes import A4
            from reportlab.lib.units import mm
            from reportlab.pdfgen import canvas as rl_canvas
        except ImportError as exc:
            raise ReportRenderError("reportlab is not installed. Run: pip install reportlab") from exc

        try:
            PAGE_W, PAGE_H = A4
            FONT_REG = "Helvetica"
            FONT_BOLD = "Helvetica-Bold"

            c = rl_canvas.Canvas(str(path), pagesize=A4)
            c.setTitle(f"{APP_NAME} Sales Report")

            # y is measured in mm from the top edge
            def text(x: float, y: float, value: str, size: int = 10, bold: bool = False):
                c.setFont(FONT_BOLD if bold else FONT_REG, size)
                c.drawString(x * mm, PAGE_H - y * mm, str(value))

            def rule(y: float):
                c.setLineWidth(0.4)
                c.line(14 * mm, PAGE_H - y * mm, 196 * mm, PAGE_H - y * mm)

            text(14, 22, "Monthly Sales Report", size=20, bold=True)
            text(14, 32, f"Name: {report.user_name}", size=12)
            text(14, 40, f"Store: {report.store}", size=12)
            text(14, 48, f"Period: {report.start} to {report.end}", size=12)

            y = 60
            for x, label in ((14, "Date"), (45, "Product"), (150, "Qty"), (170, "Price")):
                text(x, y, label, bold=True)
            y += 5
            rule(y)
            y += 10

            for sale in report.sales:
                if y > 280:
                    c.showPage()
                    y = 20
                text(14, y, sale.date)
                text(45, y, _clip(sale.product_name))
                text(150, y, str(sale.quantity))
                text(170, y, _report_money(sale.price))
                y += 10

            if y > 270:
                c.showPage()
                y = 20
            y += 5
            rule(y)
            y += 10
            text(14, y, f"Total Quantity: {report.totals.quantity}", size=12, bold=True)
            text(100, y, f"Total Value: {_report_money(report.totals.value)}", size=12, bold=True)

            c.setFont(FONT_REG, 7)
            c.drawCentredString(
                PAGE_W / 2, 10 * mm,
                f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            )
            c.save()
        except Exception as exc:
            logger.error("report_failed", format="pdf", path=str(path), error=str(exc))
            raise ReportRenderError(f"Failed to write PDF report: {exc}") from exc

        logger.info("report_exported", format="pdf", path=str(path), rows=len(report.sales))
        return path

    # ── Excel ─────────────────────────────────────────────────────────────────
    def export_excel(self, start: str, end: str, out_path: Optional[Path] = None) -> Path:
        report = self.summarize(start, end)
        path = self._target(report, ".xlsx", out_path)
        try:
            import openpyxl
            from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
        except ImportError as exc:
            raise ReportRenderError("openpyxl is not installed. Run: pip install openpyxl") from exc

        try:
            wb = openpyxl.Workbook()
            ws = wb.active
            ws.title = "Sales Report"

            now = datetime.now().strftime("%Y-%m-%d %H:%M")

            title_fill   = PatternFill("solid", fgColor="1E3A8A")
            title_font   = Font(bold=True, size=14, color="FFFFFF")
            subtitle_font = Font(size=10, color="6E6E6E")
            bold_font    = Font(bold=True, size=10)
            header_fill  = PatternFill("solid", fgColor="DBEAFE")
            header_font  = Font(bold=True, size=10, color="1F1F1F")
            total_fill   = PatternFill("solid", fgColor="F0FAF4")
            thin_border  = Border(bottom=Side(style="thin", color="BFCBDA"))
            center_align = Alignment(horizontal="center", vertical="center")
            right_align  = Alignment(horizontal="right", vertical="center")
            money_format = '"₹"#,##0.00'

            ws.merge_cells("A1:E1")
            ws["A1"] = "Monthly Sales Report"
            ws["A1"].font = title_font
            ws["A1"].fill = title_fill
            ws["A1"].alignment = center_align
            ws.row_dimensions[1].height = 28

            ws.merge_cells("A2:E2")
            ws["A2"] = (
                f"Name: {report.user_name}  |  Store: {report.store}  |  "
                f"Period: {report.start} to {report.end}  |  Generated: {now}"
            )
            ws["A2"].font = subtitle_font
            ws["A2"].alignment = center_align

            headers = ["Date", "Product", "Qty", "Price", "Value"]
            for col_idx, h in enumerate(headers, start=1):
                cell = ws.cell(row=4, column=col_idx, value=h)
                cell.font = header_font
                cell.fill = header_fill
                cell.alignment = center_align if col_idx > 2 else Alignment(horizontal="left")
                cell.border = thin_border

            for row_idx, sale in enumerate(report.sales, start=5):
                row_fill = PatternFill("solid", fgColor="FFFFFF" if row_idx % 2 == 0 else "F5F8FC")
                values = [sale.date, sale.product_name, sale.quantity, sale.price, sale.value]
                for col_idx, value in enumerate(values, start=1):
                    cell = ws.cell(row=row_idx, column=col_idx, value=value)
                    cell.fill = row_fill
                    if col_idx >= 3:
                        cell.alignment = right_align
                    if col_idx >= 4:
                        cell.number_format = money_format

            totals_row = len(report.sales) + 5
            ws.cell(row=totals_row, column=1, value="TOTAL").font = bold_font
            for col_idx, value in ((3, report.totals.quantity), (5, report.totals.value)):
                cell = ws.cell(row=totals_row, column=col_idx, value=value)
                cell.font = bold_font
                cell.alignment = right_align
                if col_idx == 5:
                    cell.number_format = money_format
            for col_idx in range(1, 6):
                ws.cell(row=totals_row, column=col_idx).fill = total_fill

            for letter, width in zip("ABCDE", (12, 40, 8, 14, 16)):
                ws.column_dimensions[letter].width = width
            ws.freeze_panes = "A5"

            wb.save(str(path))
        except Exception as exc:
            logger.error("report_failed", format="xlsx", path=str(path), error=str(exc))
            raise ReportRenderError(f"Failed to write Excel report: {exc}") from exc

        logger.info("report_exported", format="xlsx", path=str(path), rows=len(report.sales))
        return path
