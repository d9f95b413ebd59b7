"""
Meta endpoints: health, filter options, reset.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.analytics.dashboard import filter_options
from app.api.dependencies import get_store_or_empty
from app.api.response_models import FilterOptionsResponse, HealthResponse
from app.data.store import AnalyticsStore

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(store: AnalyticsStore = Depends(get_store_or_empty)):
    return HealthResponse(
        status="ok",
        rows=store.row_count(),
        groups=len(store.aggregated_data),
        busy=store.is_busy,
        source=store.source_name,
    )


@router.get("/filters/options", response_model=FilterOptionsResponse)
def list_filter_options(store: AnalyticsStore = Depends(get_store_or_empty)):
    return FilterOptionsResponse(**filter_options(store))


@router.post("/reset")
def reset(store: AnalyticsStore = Depends(get_store_or_empty)):
    """Drop the loaded export and clear all filters."""
    store.reset()
    return {"status": "reset"}
