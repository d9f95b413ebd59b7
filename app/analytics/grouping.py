"""
Filtering and regrouping of processed occurrences for the analytics table.

Everything here is recomputed from the full occurrence set on every call;
nothing is patched incrementally, so the same inputs always give the same view.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Iterable, Sequence

import pandas as pd

from app.analytics.common import late_cancellation_rate, pct, safe_divide
from app.config import DEFAULT_CAPACITY, UNKNOWN_GROUP
from app.data.processor import derive_metrics
from app.data.schemas import (
    SUMMED_FIELDS,
    ClassRecord,
    FilterState,
    GroupedRow,
    GroupingOption,
    ProcessedRecord,
)

RECORD_COLUMNS = [f.name for f in fields(ClassRecord)]


def records_frame(records: Sequence[ClassRecord]) -> pd.DataFrame:
    """One row per record, columns named after record attributes."""
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    return pd.DataFrame([asdict(r) for r in records], columns=RECORD_COLUMNS)


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def filter_mask(df: pd.DataFrame, filters: FilterState) -> pd.Series:
    """Boolean mask of rows passing every active clause.

    Text search is one more AND clause: a row must satisfy all other clauses
    and also contain the search text in its class, teacher or location.
    """
    mask = pd.Series(True, index=df.index)

    if filters.date_start:
        mask &= df["date"] >= filters.date_start
    if filters.date_end:
        mask &= df["date"] <= filters.date_end
    if filters.locations:
        mask &= df["location"].isin(filters.locations)
    if filters.teachers:
        mask &= df["teacher_name"].isin(filters.teachers)
    if filters.classes:
        mask &= df["cleaned_class"].isin(filters.classes)

    attendance = df["class_average_including_empty"]
    if filters.min_attendance is not None:
        mask &= attendance >= filters.min_attendance
    if filters.max_attendance is not None:
        mask &= attendance <= filters.max_attendance
    if filters.min_revenue is not None:
        mask &= df["total_revenue"] >= filters.min_revenue
    if filters.max_revenue is not None:
        mask &= df["total_revenue"] <= filters.max_revenue

    if filters.text_search:
        search = filters.text_search.lower()
        text_hit = (
            df["cleaned_class"].str.lower().str.contains(search, regex=False)
            | df["teacher_name"].str.lower().str.contains(search, regex=False)
            | df["location"].str.lower().str.contains(search, regex=False)
        )
        mask &= text_hit

    return mask.astype(bool)


def filter_records(records: Sequence[ProcessedRecord], filters: FilterState | None) -> list[ProcessedRecord]:
    """Records passing ``filters``, in their original order."""
    if filters is None or not records:
        return list(records)
    mask = filter_mask(records_frame(records), filters)
    return [r for r, keep in zip(records, mask.tolist()) if keep]


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

def _key_part(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def group_key(record: ClassRecord, grouping: GroupingOption | str) -> str:
    """Grouping key for one record under the selected dimension."""
    grouping = GroupingOption(grouping)
    values = [getattr(record, name) for name in grouping.fields]
    if grouping.is_compound:
        return "|".join(_key_part(v) for v in values)
    value = values[0]
    return _key_part(value) if value else UNKNOWN_GROUP


def _group_row(key: str, items: list[ProcessedRecord]) -> GroupedRow:
    totals = asdict(items[0])
    for name in SUMMED_FIELDS:
        totals[name] = sum(getattr(i, name) for i in items)
    return GroupedRow(**derive_metrics(totals), group_key=key, children=tuple(items))


def group_records(records: Iterable[ProcessedRecord], grouping: GroupingOption | str) -> list[GroupedRow]:
    """Regroup occurrences by ``grouping``; groups keep first-seen order.

    Identity fields of each group echo its first occurrence; totals are summed
    and ratios recomputed from the sums.
    """
    buckets: dict[str, list[ProcessedRecord]] = {}
    for record in records:
        buckets.setdefault(group_key(record, grouping), []).append(record)
    return [_group_row(key, items) for key, items in buckets.items()]


def grand_totals(groups: Sequence[ClassRecord], capacity: int = DEFAULT_CAPACITY) -> dict[str, float]:
    """Sum of the per-group totals plus the table-footer ratios."""
    totals: dict[str, float] = {name: sum(getattr(g, name) for g in groups) for name in SUMMED_FIELDS}
    checkins = totals["total_checkins"]
    occurrences = totals["total_occurrences"]
    totals["class_average_including_empty"] = safe_divide(checkins, occurrences)
    totals["class_average_excluding_empty"] = safe_divide(checkins, totals["total_non_empty"])
    totals["fill_rate"] = pct(safe_divide(checkins, occurrences), capacity)
    totals["late_cancellation_rate"] = late_cancellation_rate(totals["total_cancelled"], checkins)
    totals["revenue_per_attendee"] = safe_divide(totals["total_revenue"], checkins)
    return totals


# ---------------------------------------------------------------------------
# View
# ---------------------------------------------------------------------------

@dataclass
class GroupedView:
    grouping: GroupingOption
    groups: list[GroupedRow]
    totals: dict[str, float]
    record_count: int

    def find(self, key: str) -> GroupedRow | None:
        return next((g for g in self.groups if g.group_key == key), None)


def build_view(
    records: Sequence[ProcessedRecord],
    filters: FilterState | None,
    grouping: GroupingOption | str,
    capacity: int = DEFAULT_CAPACITY,
) -> GroupedView:
    """Filter, regroup and total in one pass."""
    grouping = GroupingOption(grouping)
    filtered = filter_records(records, filters)
    groups = group_records(filtered, grouping)
    return GroupedView(
        grouping=grouping,
        groups=groups,
        totals=grand_totals(groups, capacity),
        record_count=len(filtered),
    )


def drilldown_summary(records: Sequence[ClassRecord], capacity: int = DEFAULT_CAPACITY) -> dict[str, float]:
    """Headline numbers for a set of occurrences opened from one table row."""
    classes = sum(r.total_occurrences for r in records)
    attendance = sum(r.total_checkins for r in records)
    revenue = sum(r.total_revenue for r in records)
    cancelled = sum(r.total_cancelled for r in records)
    avg_attendance = safe_divide(attendance, classes)
    cap = records[0].capacity if records else capacity
    return {
        "total_classes": classes,
        "total_attendance": attendance,
        "total_revenue": revenue,
        "avg_attendance": avg_attendance,
        "fill_rate": pct(avg_attendance, cap) if classes > 0 else 0.0,
        "late_cancellation_rate": late_cancellation_rate(cancelled, attendance),
    }
