"""
Analytics table report — grouped view as JSON, CSV export and Excel workbook.
"""
from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd

from app.analytics.common import format_currency
from app.analytics.dashboard import key_metrics
from app.analytics.grouping import GroupedView, build_view
from app.config import EXPORT_EXCLUDED_FIELDS
from app.data.schemas import EXPORT_NAMES, ClassRecord, FilterState, GroupingOption
from app.data.store import AnalyticsStore
from app.excel import ClassWorkbook, Column


TABLE_COLS = [
    Column("cleanedClass", "text", "Class"),
    Column("location", "text", "Location"),
    Column("dayOfWeek", "text", "Day"),
    Column("classTime", "text", "Time"),
    Column("teacherName", "text", "Teacher"),
    Column("totalOccurrences", "count", "Classes"),
    Column("totalEmpty", "count", "Empty"),
    Column("totalNonEmpty", "count", "Non-Empty"),
    Column("totalCheckins", "count", "Check-ins"),
    Column("capacity", "count", "Capacity"),
    Column("fillRate", "percent", "Fill Rate"),
    Column("totalCancelled", "count", "Late Cancels"),
    Column("totalNonPaid", "count", "Non-Paid"),
    Column("classAverageIncludingEmpty", "decimal", "Avg (incl. empty)"),
    Column("classAverageExcludingEmpty", "decimal", "Avg (excl. empty)"),
    Column("totalRevenue", "currency", "Revenue"),
    Column("lateCancellationRate", "percent", "Late Cancel %"),
    Column("revenuePerAttendee", "currency", "Revenue / Attendee"),
]


def _export_totals(totals: dict) -> dict:
    return {EXPORT_NAMES[k]: v for k, v in totals.items()}


def current_view(
    store: AnalyticsStore,
    filters: Optional[FilterState] = None,
    grouping: Optional[GroupingOption | str] = None,
) -> GroupedView:
    """Grouped view for explicit filters/grouping, else the store's active ones."""
    return build_view(
        store.individual_classes,
        filters if filters is not None else store.filters,
        grouping if grouping is not None else store.selected_grouping,
        store.capacity,
    )


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def generate_json(store: AnalyticsStore, view: GroupedView) -> dict:
    return {
        "grouping": view.grouping.value,
        "group_count": len(view.groups),
        "record_count": view.record_count,
        "groups": [g.to_dict() for g in view.groups],
        "totals": _export_totals(view.totals),
        "totals_display": {"totalRevenue": format_currency(view.totals["total_revenue"], compact=True)},
        "source": store.source_name,
    }


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def export_rows_csv(rows: Iterable[ClassRecord]) -> str:
    """Serialize any record list to CSV text, minus internal-only fields."""
    data = [
        {k: v for k, v in r.to_dict().items() if k not in EXPORT_EXCLUDED_FIELDS}
        for r in rows
    ]
    if not data:
        columns = [v for v in EXPORT_NAMES.values() if v not in EXPORT_EXCLUDED_FIELDS]
        return pd.DataFrame(columns=columns).to_csv(index=False)
    return pd.DataFrame(data).to_csv(index=False)


def generate_csv(view: GroupedView) -> str:
    return export_rows_csv(view.groups)


# ---------------------------------------------------------------------------
# Excel
# ---------------------------------------------------------------------------

def generate_excel(store: AnalyticsStore, view: GroupedView) -> bytes:
    wb = ClassWorkbook()
    metrics = key_metrics(store) or {}

    ws = wb.add_sheet("Summary")
    wb.write_title(
        ws,
        "STUDIO CLASS ANALYTICS",
        f"{store.source_name or 'No file loaded'}  |  Grouped by {view.grouping.value}"
        f"  |  Generated {pd.Timestamp.now():%B %d, %Y}",
    )
    row = wb.write_section(ws, 5, "OVERVIEW")
    wb.write_kpi_row(ws, row, [
        (metrics.get("total_classes", 0), "TOTAL CLASSES", "count"),
        (metrics.get("total_attendance", 0), "TOTAL ATTENDANCE", "count"),
        (metrics.get("total_revenue", 0), "TOTAL REVENUE", "currency"),
        (metrics.get("cancellation_rate", 0), "LATE CANCEL RATE", "percent"),
    ])

    ws_table = wb.add_sheet("Analytics Table")
    rows = [g.to_dict() for g in view.groups]
    wb.write_table(ws_table, 1, TABLE_COLS, rows, totals=_export_totals(view.totals))

    ws_classes = wb.add_sheet("Classes")
    children = [c.to_dict() for g in view.groups for c in g.children]
    wb.write_table(ws_classes, 1, [Column("date", "text", "Date")] + TABLE_COLS, children)

    return wb.to_bytes()
