"""
Excel export helper wrapping xlsxwriter.

Provides ``ExcelExporter``, a stateful builder that constructs a styled
BudgetFlow workbook in memory and returns its bytes for streaming via
FastAPI's ``StreamingResponse``.

Usage example::

    exporter = ExcelExporter(title="Budget Report", filters={"Status": "Approved"})
    exporter.add_header()
    exporter.add_kpi_row(kpis)
    exporter.add_data_table(headers, rows, numeric_cols={3}, status_col=4)
    exporter.add_sheet("By Department")
    exporter.add_data_table(dept_headers, dept_rows)
    file_bytes = exporter.finalize()

Design notes
------------
- Uses ``xlsxwriter`` in in-memory mode (``BytesIO``).
- Column widths are auto-sized from the longest cell (capped at 60 chars).
- Money columns use ``#,##0.00``; ``Decimal`` values are written as numbers.
- A status column can be tinted with the status chart colours so the sheet
  reads like the dashboard.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Sequence

import xlsxwriter
from xlsxwriter.worksheet import Worksheet

from budgetflow.utils.constants import STATUS_CHART_BUCKET, STATUS_CHART_COLORS, BudgetStatus

_COLOR_PRIMARY = "#2563eb"
_COLOR_DARK = "#1e293b"
_COLOR_WHITE = "#FFFFFF"
_COLOR_LIGHT_GREY = "#F3F4F6"
_COLOR_BORDER = "#E5E7EB"

_MAX_COL_WIDTH = 60
_MIN_COL_WIDTH = 8
_HEADER_SPAN = 7


def _cell(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


class ExcelExporter:
    """Stateful Excel workbook builder for BudgetFlow exports.

    Args:
        title: Report title, e.g. ``"Budget Report"``.
        filters: Applied filter labels shown under the title.
        sheet_name: Name of the first worksheet tab.
    """

    def __init__(
        self,
        title: str,
        filters: dict[str, str] | None = None,
        sheet_name: str = "Budgets",
    ) -> None:
        self._title = title
        self._filters = filters or {}

        self._buffer = io.BytesIO()
        self._workbook = xlsxwriter.Workbook(self._buffer, {"in_memory": True})
        self._formats: dict[str, Any] = self._build_formats()

        self._worksheet: Worksheet = self._workbook.add_worksheet(sheet_name)
        self._current_row = 0

    # -----------------------------------------------------------------------
    # Format factory
    # -----------------------------------------------------------------------

    def _build_formats(self) -> dict[str, Any]:
        wb = self._workbook
        cell = {"font_size": 9, "font_color": "#111827", "valign": "vcenter",
                "border": 1, "border_color": _COLOR_BORDER}

        formats: dict[str, Any] = {
            "title": wb.add_format({
                "bold": True, "font_size": 16, "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_PRIMARY, "align": "center", "valign": "vcenter",
            }),
            "subtitle": wb.add_format({
                "font_size": 10, "font_color": _COLOR_WHITE, "bg_color": _COLOR_DARK,
                "align": "center", "valign": "vcenter",
            }),
            "filter_key": wb.add_format({
                "bold": True, "font_size": 9, "bg_color": "#E5E7EB", "align": "right",
            }),
            "filter_value": wb.add_format({"font_size": 9, "bg_color": "#F9FAFB"}),
            "kpi_label": wb.add_format({
                "bold": True, "font_size": 10, "bg_color": "#EFF6FF", "align": "center",
                "border": 1, "border_color": "#BFDBFE",
            }),
            "kpi_value": wb.add_format({
                "bold": True, "font_size": 12, "font_color": _COLOR_PRIMARY,
                "bg_color": "#EFF6FF", "align": "center", "num_format": "#,##0.00",
                "border": 1, "border_color": "#BFDBFE",
            }),
            "col_header": wb.add_format({
                "bold": True, "font_size": 10, "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_DARK, "align": "center", "valign": "vcenter",
                "border": 1, "border_color": "#CBD5E1", "text_wrap": True,
            }),
        }
        for shade, bg in (("", _COLOR_WHITE), ("_alt", _COLOR_LIGHT_GREY)):
            formats[f"text{shade}"] = wb.add_format({**cell, "bg_color": bg, "align": "left"})
            formats[f"money{shade}"] = wb.add_format(
                {**cell, "bg_color": bg, "align": "right", "num_format": "#,##0.00"}
            )
        for bucket, color in STATUS_CHART_COLORS.items():
            formats[f"status_{bucket}"] = wb.add_format(
                {**cell, "bold": True, "font_color": color, "align": "center"}
            )
        return formats

    def _status_format(self, value: Any, default: Any) -> Any:
        try:
            bucket = STATUS_CHART_BUCKET[BudgetStatus(value)]
        except ValueError:
            return default
        return self._formats.get(f"status_{bucket}", default)

    # -----------------------------------------------------------------------
    # Public builder methods
    # -----------------------------------------------------------------------

    def add_sheet(self, name: str) -> "ExcelExporter":
        """Start a new worksheet; later calls write to it."""
        self._worksheet = self._workbook.add_worksheet(name[:31])
        self._current_row = 0
        return self

    def add_header(self) -> "ExcelExporter":
        """Write the title band, generation timestamp and filter rows."""
        ws = self._worksheet
        last_col = _HEADER_SPAN - 1

        ws.set_row(self._current_row, 32)
        ws.merge_range(self._current_row, 0, self._current_row, last_col,
                       f"BudgetFlow | {self._title}", self._formats["title"])
        self._current_row += 1

        generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        ws.merge_range(self._current_row, 0, self._current_row, last_col,
                       f"Generated: {generated}", self._formats["subtitle"])
        self._current_row += 1

        for key, value in self._filters.items():
            ws.write(self._current_row, 0, key, self._formats["filter_key"])
            ws.merge_range(self._current_row, 1, self._current_row, last_col,
                           value, self._formats["filter_value"])
            self._current_row += 1

        self._current_row += 1
        return self

    def add_kpi_row(self, kpis: dict[str, Any]) -> "ExcelExporter":
        """Write KPI labels with their values underneath, one column per KPI."""
        ws = self._worksheet
        for col, (label, value) in enumerate(kpis.items()):
            ws.write(self._current_row, col, label, self._formats["kpi_label"])
            ws.write(self._current_row + 1, col, _cell(value), self._formats["kpi_value"])
        ws.set_row(self._current_row + 1, 22)
        self._current_row += 3
        return self

    def add_data_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        numeric_cols: set[int] | None = None,
        status_col: int | None = None,
    ) -> "ExcelExporter":
        """Write a table with alternating row shading.

        Args:
            headers: Column header strings.
            rows: Data rows matching ``headers`` in length.
            numeric_cols: Zero-based money columns. Auto-detected from the
                          first row when ``None``.
            status_col: Column holding a budget status to tint.
        """
        ws = self._worksheet
        if numeric_cols is None:
            numeric_cols = {
                ci for ci, val in enumerate(rows[0] if rows else [])
                if isinstance(val, (int, float, Decimal)) and not isinstance(val, bool)
            }

        widths = [len(str(h)) for h in headers]
        ws.set_row(self._current_row, 20)
        for ci, header in enumerate(headers):
            ws.write(self._current_row, ci, header, self._formats["col_header"])
        self._current_row += 1

        for ri, data_row in enumerate(rows):
            shade = "_alt" if ri % 2 else ""
            for ci, value in enumerate(data_row):
                fmt = self._formats[f"money{shade}" if ci in numeric_cols else f"text{shade}"]
                if ci == status_col:
                    fmt = self._status_format(value, fmt)
                ws.write(self._current_row, ci, _cell(value), fmt)
                text = "" if value is None else str(value)
                widths[ci] = min(_MAX_COL_WIDTH, max(widths[ci], len(text)))
            self._current_row += 1

        for ci, width in enumerate(widths):
            ws.set_column(ci, ci, max(width + 2, _MIN_COL_WIDTH))
        self._current_row += 1
        return self

    def finalize(self) -> bytes:
        """Close the workbook and return the ``.xlsx`` bytes. Do not reuse the exporter."""
        self._workbook.close()
        self._buffer.seek(0)
        return self._buffer.read()
