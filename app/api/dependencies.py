"""
FastAPI dependencies — AnalyticsStore wiring, grouping parsing.
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Query, Request

from app.data.schemas import GroupingOption
from app.data.store import AnalyticsStore


# ---------------------------------------------------------------------------
# Store (one per app instance, created in the app factory)
# ---------------------------------------------------------------------------

def get_store_or_empty(request: Request) -> AnalyticsStore:
    """Return the store even if it has no data (for upload/reset endpoints)."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(503, "Server not initialized yet")
    return store


def get_store(request: Request) -> AnalyticsStore:
    store = get_store_or_empty(request)
    if not store.is_loaded:
        raise HTTPException(503, "No data loaded. Upload a CSV or ZIP export first.")
    return store


# ---------------------------------------------------------------------------
# Query params
# ---------------------------------------------------------------------------

def parse_grouping(
    grouping: Optional[str] = Query(None, description="Grouping dimension, e.g. cleanedClass or day-time-class"),
) -> GroupingOption | None:
    """Optional per-request grouping override."""
    if grouping is None:
        return None
    try:
        return GroupingOption(grouping)
    except ValueError:
        raise HTTPException(400, f"Invalid grouping: {grouping}")
