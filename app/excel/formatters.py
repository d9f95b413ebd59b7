"""
Cell-level helpers: typed values, header rows, KPI cards, column widths.
"""
from __future__ import annotations

from typing import Any, NamedTuple, Optional

from openpyxl.styles import PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from app.excel.styles import (
    CELL_BORDER,
    CELL_FONT,
    CENTER,
    FILL_RATE_BANDS,
    HEADER_BORDER,
    HEADER_FILL,
    HEADER_FONT,
    KPI_LABEL_FONT,
    KPI_VALUE_FONT,
    LEFT,
    RIGHT,
    STRIPE_FILL,
    TOTAL_BORDER,
    TOTAL_FILL,
    TOTAL_FONT,
)

# Excel only knows thousands separators, so lakh/crore grouping (1,23,457)
# needs one section per magnitude
INR_FORMAT = (
    '[>=10000000]"₹"##\\,##\\,##\\,##0;'
    '[>=100000]"₹"##\\,##\\,##0;'
    '"₹"##,##0'
)

NUMBER_FORMATS = {
    "currency": INR_FORMAT,
    "percent": '0.0"%"',
    "count": "#,##0",
    "decimal": "0.0",
}


class Column(NamedTuple):
    """One table column: export field name, value kind, header label."""
    key: str
    kind: str
    label: str


def band_fill(fill_rate: float) -> Optional[PatternFill]:
    """Row shading for a fill rate, None below the lowest band."""
    for floor, fill in FILL_RATE_BANDS:
        if fill_rate > floor:
            return fill
    return None


def style_header(ws: Worksheet, row: int, columns: list[Column]) -> None:
    for col, column in enumerate(columns, 1):
        cell = ws.cell(row=row, column=col, value=column.label)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER
        cell.border = HEADER_BORDER


def write_cell(
    ws: Worksheet,
    row: int,
    col: int,
    value: Any,
    kind: str = "text",
    total: bool = False,
    shade: Optional[PatternFill] = None,
) -> None:
    """Write one value with the number format of its kind."""
    cell = ws.cell(row=row, column=col, value=value)
    cell.font = TOTAL_FONT if total else CELL_FONT
    cell.border = TOTAL_BORDER if total else CELL_BORDER
    numeric = kind in NUMBER_FORMATS
    cell.alignment = RIGHT if numeric else LEFT
    if numeric:
        cell.number_format = NUMBER_FORMATS[kind]

    if total:
        cell.fill = TOTAL_FILL
    elif shade is not None:
        cell.fill = shade
    elif row % 2 == 0:
        cell.fill = STRIPE_FILL


def write_kpi(ws: Worksheet, row: int, col: int, value: Any, label: str, kind: str = "count") -> None:
    """Large value with its caption underneath."""
    value_cell = ws.cell(row=row, column=col, value=value)
    value_cell.font = KPI_VALUE_FONT
    value_cell.alignment = CENTER
    if kind in NUMBER_FORMATS:
        value_cell.number_format = NUMBER_FORMATS[kind]

    label_cell = ws.cell(row=row + 1, column=col, value=label)
    label_cell.font = KPI_LABEL_FONT
    label_cell.alignment = CENTER


def fit_columns(ws: Worksheet, min_width: int = 10, max_width: int = 48) -> None:
    """Size each column to its longest rendered value."""
    for column in ws.iter_cols():
        longest = max((len(str(c.value)) for c in column if c.value is not None), default=0)
        letter = get_column_letter(column[0].column)
        ws.column_dimensions[letter].width = min(max(longest + 2, min_width), max_width)
