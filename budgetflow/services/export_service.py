"""
Export service layer.

Builds CSV, Excel and PDF downloads of the caller's (filtered) budgets. The
row selection is the same ``budget_service.fetch_budgets`` call the budget
table and the reports use; the KPI block comes from the aggregation engine.

Design notes
------------
- The CSV keeps the column set of the original report export: Budget ID,
  Department, Type, Amount, Status, Submitted Date, Reviewed Date.
- Excel and PDF share ``_export_data`` so column definitions live in one
  place; the Excel workbook adds a per-department sheet.
- Money columns are identified by index so the exporters can format them.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from budgetflow.domain import aggregation
from budgetflow.domain.filters import BudgetFilter
from budgetflow.exporters.excel_exporter import ExcelExporter
from budgetflow.exporters.pdf_exporter import PdfExporter
from budgetflow.models.budget import Budget
from budgetflow.models.user_profile import UserProfile
from budgetflow.services import budget_service

logger = logging.getLogger(__name__)

CSV_HEADERS: list[str] = [
    "Budget ID",
    "Department",
    "Type",
    "Amount",
    "Status",
    "Submitted Date",
    "Reviewed Date",
]

_TABLE_HEADERS: list[str] = [
    "Budget ID",
    "Department",
    "Cost Center",
    "Type",
    "Amount",
    "Status",
    "Submitted",
    "Reviewed",
]
_AMOUNT_COL = 4
_STATUS_COL = 5


def _date(value: datetime | None) -> str:
    return value.date().isoformat() if value is not None else ""


def _filter_labels(criteria: BudgetFilter) -> dict[str, str]:
    labels: dict[str, str] = {}
    if criteria.search_query:
        labels["Search"] = criteria.search_query
    if criteria.status:
        labels["Status"] = criteria.status
    if criteria.department:
        labels["Department"] = criteria.department
    if criteria.budget_type:
        labels["Type"] = criteria.budget_type
    if criteria.date_from:
        labels["From"] = criteria.date_from.isoformat()
    if criteria.date_to:
        labels["To"] = criteria.date_to.isoformat()
    return labels


def _export_data(
    rows: list[Budget],
) -> tuple[list[list[Any]], dict[str, Any]]:
    """Return the table rows and the KPI block for *rows*."""
    summary = aggregation.summarize(rows)
    kpis: dict[str, Any] = {
        "Budgets": summary.total_count,
        "Total": summary.total_amount,
        "Approved": summary.approved_amount,
        "Pending": summary.pending_amount,
        "Rejected": summary.rejected_amount,
        "Approval Rate": f"{summary.approval_rate_percent}%",
    }
    table = [
        [
            b.budget_id,
            b.department or "",
            b.cost_center or "",
            b.budget_type or "",
            b.amount,
            b.status,
            _date(b.submitted_at),
            _date(b.reviewed_at),
        ]
        for b in rows
    ]
    return table, kpis


# ---------------------------------------------------------------------------
# Public export functions
# ---------------------------------------------------------------------------


def export_csv(db: Session, user: UserProfile, criteria: BudgetFilter) -> bytes:
    """Return the budgets as UTF-8 CSV (with BOM, so spreadsheet apps detect the encoding)."""
    rows = budget_service.fetch_budgets(db, user, criteria)
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADERS)
    for b in rows:
        writer.writerow([
            b.budget_id,
            b.department or "",
            b.budget_type or "",
            f"{b.amount:.2f}",
            b.status,
            _date(b.submitted_at),
            _date(b.reviewed_at),
        ])
    data = buffer.getvalue().encode("utf-8-sig")
    logger.info("export_csv: rows=%d bytes=%d by '%s'", len(rows), len(data), user.username)
    return data


def export_excel(db: Session, user: UserProfile, criteria: BudgetFilter) -> bytes:
    """Return an ``.xlsx`` workbook: budget table plus a per-department sheet."""
    rows = budget_service.fetch_budgets(db, user, criteria)
    table, kpis = _export_data(rows)

    exporter = ExcelExporter(title="Budget Report", filters=_filter_labels(criteria))
    exporter.add_header()
    exporter.add_kpi_row(kpis)
    exporter.add_data_table(
        _TABLE_HEADERS, table, numeric_cols={_AMOUNT_COL}, status_col=_STATUS_COL
    )

    exporter.add_sheet("By Department")
    exporter.add_data_table(
        ["Department", "Budgets", "Total", "Approved", "Pending"],
        [
            [d.department, d.count, d.total, d.approved, d.pending]
            for d in aggregation.group_by_department(rows)
        ],
        numeric_cols={2, 3, 4},
    )
    file_bytes = exporter.finalize()

    logger.info("export_excel: rows=%d bytes=%d by '%s'", len(rows), len(file_bytes), user.username)
    return file_bytes


def export_pdf(db: Session, user: UserProfile, criteria: BudgetFilter) -> bytes:
    """Return a landscape PDF report with KPIs, the budget table and department totals."""
    rows = budget_service.fetch_budgets(db, user, criteria)
    table, kpis = _export_data(rows)

    exporter = PdfExporter(title="Budget Report", filters=_filter_labels(criteria), landscape_mode=True)
    exporter.add_header()
    exporter.add_kpi_section(kpis)
    exporter.add_table(
        _TABLE_HEADERS, table, numeric_cols={_AMOUNT_COL}, status_col=_STATUS_COL,
        section_title="Budgets",
    )
    exporter.add_table(
        ["Department", "Budgets", "Total", "Approved", "Pending"],
        [
            [d.department, d.count, d.total, d.approved, d.pending]
            for d in aggregation.group_by_department(rows)
        ],
        numeric_cols={1, 2, 3, 4},
        section_title="By Department",
    )
    file_bytes = exporter.build()

    logger.info("export_pdf: rows=%d bytes=%d by '%s'", len(rows), len(file_bytes), user.username)
    return file_bytes
