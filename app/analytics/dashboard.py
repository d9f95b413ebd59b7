"""
Dashboard analytics — headline metrics and filter options for the loaded export.
"""
from __future__ import annotations

from typing import Optional

from app.analytics.common import format_currency, late_cancellation_rate, round_half_up, safe_divide
from app.data.schemas import AggregatedRecord, ProcessedRecord
from app.data.store import AnalyticsStore


def _unique(values) -> list[str]:
    """Distinct values in first-seen order."""
    return list(dict.fromkeys(values))


def key_metrics(store: AnalyticsStore) -> Optional[dict]:
    """Totals across the canonical aggregates; None before any upload."""
    aggregated: tuple[AggregatedRecord, ...] = store.aggregated_data
    if not aggregated:
        return None

    total_classes = sum(d.total_occurrences for d in aggregated)
    total_attendance = sum(d.total_checkins for d in aggregated)
    total_revenue = sum(d.total_revenue for d in aggregated)
    total_cancellations = sum(d.total_cancelled for d in aggregated)
    avg_revenue = safe_divide(total_revenue, total_classes)

    return {
        "total_classes": total_classes,
        "total_attendance": total_attendance,
        "total_revenue": total_revenue,
        "total_revenue_display": format_currency(total_revenue, compact=True),
        "avg_attendance": round_half_up(safe_divide(total_attendance, total_classes)),
        "avg_revenue": avg_revenue,
        "avg_revenue_display": format_currency(avg_revenue),
        "cancellation_rate": round_half_up(late_cancellation_rate(total_cancellations, total_attendance)),
        "unique_groups": len(aggregated),
    }


def filter_options(store: AnalyticsStore) -> dict[str, list[str]]:
    """Choices for the location / teacher / class pickers."""
    records: tuple[ProcessedRecord, ...] = store.individual_classes
    return {
        "locations": _unique(r.location for r in records),
        "teachers": _unique(r.teacher_name for r in records),
        "classes": _unique(r.cleaned_class for r in records),
    }
