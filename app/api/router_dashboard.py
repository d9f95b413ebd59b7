"""
Dashboard endpoints — key metrics, filters, grouping, grouped table, drill-down.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from app.analytics.dashboard import key_metrics
from app.analytics.grouping import drilldown_summary
from app.api.dependencies import get_store, get_store_or_empty, parse_grouping
from app.api.response_models import (
    FiltersModel,
    FiltersResponse,
    GroupingRequest,
    GroupingResponse,
)
from app.data.schemas import GroupingOption
from app.data.store import AnalyticsStore
from app.reports.analytics_report import current_view, generate_json

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/metrics")
def metrics(store: AnalyticsStore = Depends(get_store)):
    """Headline totals across every class in the loaded export."""
    return key_metrics(store)


# ── Filters & grouping ────────────────────────────────────────────

@router.get("/filters", response_model=FiltersResponse)
def get_filters(store: AnalyticsStore = Depends(get_store_or_empty)):
    filters = store.filters
    return FiltersResponse(filters=FiltersModel.from_state(filters), active_count=filters.active_count)


@router.put("/filters", response_model=FiltersResponse)
def put_filters(body: FiltersModel, store: AnalyticsStore = Depends(get_store_or_empty)):
    """Replace the active filters wholesale."""
    store.set_filters(body.to_state())
    filters = store.filters
    return FiltersResponse(filters=FiltersModel.from_state(filters), active_count=filters.active_count)


@router.put("/grouping", response_model=GroupingResponse)
def put_grouping(body: GroupingRequest, store: AnalyticsStore = Depends(get_store_or_empty)):
    try:
        store.set_selected_grouping(body.grouping)
    except ValueError:
        raise HTTPException(400, f"Invalid grouping: {body.grouping}")
    return GroupingResponse(grouping=store.selected_grouping.value)


@router.get("/groupings")
def list_groupings():
    return {"groupings": [g.value for g in GroupingOption]}


# ── Grouped table ─────────────────────────────────────────────────

@router.get("/groups")
def groups(
    store: AnalyticsStore = Depends(get_store),
    grouping: GroupingOption | None = Depends(parse_grouping),
):
    """Filtered, grouped class table with grand totals."""
    return generate_json(store, current_view(store, grouping=grouping))


@router.get("/groups/drilldown")
def drilldown(
    group_key: str = Query(..., description="groupKey of a row from /api/groups"),
    store: AnalyticsStore = Depends(get_store),
    grouping: GroupingOption | None = Depends(parse_grouping),
):
    """The individual classes behind one grouped row."""
    view = current_view(store, grouping=grouping)
    group = view.find(group_key)
    if group is None:
        raise HTTPException(404, f"Group not found: {group_key}")
    return {
        "title": group_key,
        "data": [c.to_dict() for c in group.children],
        "aggregates": drilldown_summary(group.children, store.capacity),
    }
