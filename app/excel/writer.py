"""
ClassWorkbook: builds the styled analytics workbook in memory.
"""
from __future__ import annotations

import io
from typing import Any, Iterable, Optional

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from app.excel.formatters import (
    Column,
    band_fill,
    fit_columns,
    style_header,
    write_cell,
    write_kpi,
)
from app.excel.styles import SECTION_FONT, SUBTITLE_FONT, TITLE_FONT


class ClassWorkbook:
    """Sheets are added in order; the default empty sheet is reused first."""

    def __init__(self) -> None:
        self.wb = Workbook()
        self._fresh = True

    def add_sheet(self, title: str) -> Worksheet:
        if self._fresh:
            self._fresh = False
            ws = self.wb.active
            ws.title = title
            return ws
        return self.wb.create_sheet(title=title)

    def write_title(self, ws: Worksheet, title: str, subtitle: str, span: int = 8) -> int:
        """Title and subtitle across ``span`` merged columns. Returns the next free row."""
        for row, text, font in ((1, title, TITLE_FONT), (2, subtitle, SUBTITLE_FONT)):
            cell = ws.cell(row=row, column=1, value=text)
            cell.font = font
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=span)
        return 4

    def write_section(self, ws: Worksheet, row: int, title: str) -> int:
        ws.cell(row=row, column=1, value=title).font = SECTION_FONT
        return row + 2

    def write_kpi_row(self, ws: Worksheet, row: int, kpis: Iterable[tuple[Any, str, str]], spacing: int = 2) -> int:
        """KPI cards left to right, each ``(value, label, kind)``."""
        for i, (value, label, kind) in enumerate(kpis):
            write_kpi(ws, row, 1 + i * spacing, value, label, kind)
        return row + 3

    def write_table(
        self,
        ws: Worksheet,
        start_row: int,
        columns: list[Column],
        rows: list[dict],
        totals: Optional[dict] = None,
        total_label: str = "TOTAL",
    ) -> int:
        """Header, one line per row dict, optional totals line.

        Rows carrying a ``fillRate`` are shaded by band. Returns the row after
        the last one written.
        """
        style_header(ws, start_row, columns)

        row = start_row + 1
        for data in rows:
            shade = band_fill(data.get("fillRate", 0) or 0)
            for col, column in enumerate(columns, 1):
                write_cell(ws, row, col, data.get(column.key, 0), column.kind, shade=shade)
            row += 1

        if totals is not None and rows:
            write_cell(ws, row, 1, total_label, total=True)
            for col, column in enumerate(columns[1:], 2):
                value = totals.get(column.key)
                if value is None:
                    write_cell(ws, row, col, "", total=True)
                else:
                    write_cell(ws, row, col, value, column.kind, total=True)
            row += 1

        fit_columns(ws)
        ws.freeze_panes = f"A{start_row + 1}"
        return row

    def to_bytes(self) -> bytes:
        """Serialized .xlsx; nothing touches the disk."""
        buffer = io.BytesIO()
        self.wb.save(buffer)
        return buffer.getvalue()
