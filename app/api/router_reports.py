"""
Export endpoints — grouped table as CSV or Excel for the active view.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.api.dependencies import get_store, parse_grouping
from app.config import EXPORT_BASENAME
from app.data.schemas import GroupingOption
from app.data.store import AnalyticsStore
from app.reports.analytics_report import current_view, generate_csv, generate_excel

router = APIRouter(prefix="/api/export", tags=["export"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.get("/csv")
def export_csv(
    store: AnalyticsStore = Depends(get_store),
    grouping: GroupingOption | None = Depends(parse_grouping),
):
    csv_text = generate_csv(current_view(store, grouping=grouping))
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers=_attachment(f"{EXPORT_BASENAME}.csv"),
    )


@router.get("/excel")
def export_excel(
    store: AnalyticsStore = Depends(get_store),
    grouping: GroupingOption | None = Depends(parse_grouping),
):
    content = generate_excel(store, current_view(store, grouping=grouping))
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers=_attachment(f"{EXPORT_BASENAME}.xlsx"),
    )
