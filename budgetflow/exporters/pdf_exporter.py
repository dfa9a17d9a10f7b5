"""
PDF export helper wrapping reportlab.

Provides ``PdfExporter``, a stateful builder that constructs a styled
BudgetFlow report in memory and returns its bytes for streaming via
FastAPI's ``StreamingResponse``.

Usage example::

    exporter = PdfExporter(title="Budget Report", filters={"Department": "IT"})
    exporter.add_header()
    exporter.add_kpi_section(kpis)
    exporter.add_table(headers, rows, status_col=4)
    file_bytes = exporter.build()

Design notes
------------
- ``SimpleDocTemplate`` with Platypus flowables; A4, landscape for wide tables.
- Every page carries a footer with the page number and generation time.
- Cell text is wrapped in ``Paragraph`` objects, so user-entered text is
  XML-escaped before it reaches the reportlab markup parser.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import cm, mm
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from budgetflow.utils.constants import STATUS_CHART_BUCKET, STATUS_CHART_COLORS, BudgetStatus

_PRIMARY = colors.HexColor("#2563eb")
_DARK = colors.HexColor("#1e293b")
_LIGHT_GREY = colors.HexColor("#F3F4F6")
_MID_GREY = colors.HexColor("#E5E7EB")
_TEXT = colors.HexColor("#111827")
_WHITE = colors.white


def _format(value: Any) -> str:
    if isinstance(value, (float, Decimal)):
        return f"{value:,.2f}"
    return "" if value is None else str(value)


def _style(name: str, *, bold: bool = False, size: float = 8, color: Any = _TEXT,
           align: int = TA_LEFT, **extra: Any) -> ParagraphStyle:
    return ParagraphStyle(
        name,
        fontName="Helvetica-Bold" if bold else "Helvetica",
        fontSize=size,
        leading=size * 1.2,
        textColor=color,
        alignment=align,
        **extra,
    )


class PdfExporter:
    """Stateful PDF document builder for BudgetFlow exports.

    Args:
        title: Document title, e.g. ``"Budget Report"``.
        filters: Applied filter labels shown under the title.
        landscape_mode: Use A4 landscape instead of portrait.
    """

    def __init__(
        self,
        title: str,
        filters: dict[str, str] | None = None,
        landscape_mode: bool = False,
    ) -> None:
        self._title = title
        self._filters = filters or {}

        self._buffer = io.BytesIO()
        self._doc = SimpleDocTemplate(
            self._buffer,
            pagesize=landscape(A4) if landscape_mode else A4,
            rightMargin=1.5 * cm,
            leftMargin=1.5 * cm,
            topMargin=2 * cm,
            bottomMargin=2 * cm,
            title=f"BudgetFlow | {title}",
            author="BudgetFlow",
        )
        self._story: list[Any] = []
        self._generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        self._styles = {
            "title": _style("bf_title", bold=True, size=18, color=_WHITE, align=TA_CENTER),
            "subtitle": _style("bf_subtitle", size=9, color=_WHITE, align=TA_CENTER),
            "filter_key": _style("bf_filter_key", bold=True, color=_DARK, align=TA_RIGHT),
            "filter_value": _style("bf_filter_value"),
            "kpi_label": _style("bf_kpi_label", bold=True, color=_DARK, align=TA_CENTER),
            "kpi_value": _style("bf_kpi_value", bold=True, size=13, color=_PRIMARY, align=TA_CENTER),
            "heading": _style("bf_heading", bold=True, size=11, color=_DARK, spaceBefore=8, spaceAfter=4),
            "th": _style("bf_th", bold=True, color=_WHITE, align=TA_CENTER),
            "td": _style("bf_td"),
            "td_right": _style("bf_td_right", align=TA_RIGHT),
        }
        self._status_styles = {
            bucket: _style(f"bf_status_{bucket}", bold=True, color=colors.HexColor(color), align=TA_CENTER)
            for bucket, color in STATUS_CHART_COLORS.items()
        }

    def _on_page(self, canvas: Any, doc: Any) -> None:
        canvas.saveState()
        canvas.setFont("Helvetica", 7)
        canvas.setFillColor(colors.HexColor("#9CA3AF"))
        canvas.drawCentredString(
            self._doc.pagesize[0] / 2,
            1.2 * cm,
            f"BudgetFlow  |  Generated: {self._generated}  |  Page {doc.page}",
        )
        canvas.restoreState()

    def _section(self, title: str) -> None:
        self._story.append(Paragraph(escape(title), self._styles["heading"]))
        self._story.append(HRFlowable(width="100%", thickness=1, color=_PRIMARY))
        self._story.append(Spacer(1, 3 * mm))

    def _status_style(self, value: Any, default: ParagraphStyle) -> ParagraphStyle:
        try:
            bucket = STATUS_CHART_BUCKET[BudgetStatus(value)]
        except ValueError:
            return default
        return self._status_styles.get(bucket, default)

    # -----------------------------------------------------------------------
    # Public builder methods
    # -----------------------------------------------------------------------

    def add_header(self) -> "PdfExporter":
        """Add the title band and, when filters were given, the filter summary."""
        width = self._doc.width
        band = Table(
            [
                [Paragraph(escape(f"BudgetFlow | {self._title}"), self._styles["title"])],
                [Paragraph(f"Generated: {self._generated}", self._styles["subtitle"])],
            ],
            colWidths=[width],
        )
        band.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (0, 0), _PRIMARY),
            ("BACKGROUND", (0, 1), (0, 1), _DARK),
            ("TOPPADDING", (0, 0), (-1, -1), 8),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        self._story.extend([band, Spacer(1, 4 * mm)])

        if self._filters:
            rows = [
                [Paragraph(escape(f"{k}:"), self._styles["filter_key"]),
                 Paragraph(escape(str(v)), self._styles["filter_value"])]
                for k, v in self._filters.items()
            ]
            table = Table(rows, colWidths=[3.5 * cm, width - 3.5 * cm])
            table.setStyle(TableStyle([
                ("BACKGROUND", (0, 0), (-1, -1), _LIGHT_GREY),
                ("GRID", (0, 0), (-1, -1), 0.25, _MID_GREY),
            ]))
            self._story.extend([table, Spacer(1, 6 * mm)])
        return self

    def add_kpi_section(self, kpis: dict[str, Any], title: str = "Key Figures") -> "PdfExporter":
        """Render KPIs as one row of label/value cards."""
        if not kpis:
            return self
        self._section(title)
        labels = [Paragraph(escape(label), self._styles["kpi_label"]) for label in kpis]
        values = [Paragraph(escape(_format(v)), self._styles["kpi_value"]) for v in kpis.values()]
        table = Table([labels, values], colWidths=[self._doc.width / len(kpis)] * len(kpis))
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#EFF6FF")),
            ("BACKGROUND", (0, 1), (-1, 1), colors.HexColor("#DBEAFE")),
            ("BOX", (0, 0), (-1, -1), 0.5, _PRIMARY),
            ("INNERGRID", (0, 0), (-1, -1), 0.25, _MID_GREY),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        self._story.extend([table, Spacer(1, 6 * mm)])
        return self

    def add_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        numeric_cols: set[int] | None = None,
        status_col: int | None = None,
        section_title: str = "Detail",
    ) -> "PdfExporter":
        """Add a table with a repeating header row and alternating shading.

        Args:
            headers: Column header strings.
            rows: Data rows matching ``headers`` in length.
            numeric_cols: Right-aligned columns; auto-detected when ``None``.
            status_col: Column holding a budget status to colour.
            section_title: Heading shown above the table.
        """
        self._section(section_title)
        if numeric_cols is None:
            numeric_cols = {
                ci for ci, val in enumerate(rows[0] if rows else [])
                if isinstance(val, (int, float, Decimal)) and not isinstance(val, bool)
            }

        data: list[list[Any]] = [[Paragraph(escape(str(h)), self._styles["th"]) for h in headers]]
        for row in rows:
            cells = []
            for ci, value in enumerate(row):
                style = self._styles["td_right" if ci in numeric_cols else "td"]
                if ci == status_col:
                    style = self._status_style(value, style)
                cells.append(Paragraph(escape(_format(value)), style))
            data.append(cells)

        table = Table(data, colWidths=[self._doc.width / len(headers)] * len(headers), repeatRows=1)
        commands: list[tuple[Any, ...]] = [
            ("BACKGROUND", (0, 0), (-1, 0), _DARK),
            ("GRID", (0, 0), (-1, -1), 0.25, _MID_GREY),
            ("TOPPADDING", (0, 0), (-1, -1), 3),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]
        commands.extend(
            ("BACKGROUND", (0, ri), (-1, ri), _LIGHT_GREY if ri % 2 == 0 else _WHITE)
            for ri in range(1, len(data))
        )
        table.setStyle(TableStyle(commands))
        self._story.extend([table, Spacer(1, 4 * mm)])
        return self

    def build(self) -> bytes:
        """Render the document and return the ``.pdf`` bytes. Do not reuse the exporter."""
        self._doc.build(self._story, onFirstPage=self._on_page, onLaterPages=self._on_page)
        self._buffer.seek(0)
        return self._buffer.read()
