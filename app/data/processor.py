"""
Record building and aggregation: raw rows → occurrences → canonical aggregates.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from app.analytics.common import (
    fill_rate,
    late_cancellation_rate,
    revenue_per_attendee,
    round_half_up,
    safe_divide,
)
from app.config import DEFAULT_CAPACITY, UNKNOWN_LOCATION
from app.data.normalize import (
    canonicalize_class,
    coerce_checked_in,
    coerce_number,
    lookup,
    parse_class_datetime,
)
from app.data.schemas import SUMMED_FIELDS, AggregatedRecord, ProcessedRecord

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Record builder
# ---------------------------------------------------------------------------

def _text(value: Any) -> str:
    return str(value).strip()


def build_record(row: Mapping[str, Any], index: int, capacity: int = DEFAULT_CAPACITY) -> ProcessedRecord:
    """Build one occurrence record from one raw export row."""
    first = _text(lookup(row, "teacher_first_name"))
    last = _text(lookup(row, "teacher_last_name"))
    teacher_name = f"{first} {last}".strip()
    teacher_email = _text(lookup(row, "teacher_email"))
    location = _text(lookup(row, "location", UNKNOWN_LOCATION))
    class_raw = lookup(row, "class_name")
    date_raw = lookup(row, "class_date")
    total_time = coerce_number(lookup(row, "total_time", 0))

    checked_in = coerce_checked_in(lookup(row, "checked_in", 0))
    comps = coerce_number(lookup(row, "comps", 0))
    late_cancelled = coerce_number(lookup(row, "late_cancelled", 0))
    paid = coerce_number(lookup(row, "paid", 0))
    non_paid = comps + coerce_number(lookup(row, "non_paid", 0))

    cleaned_class = canonicalize_class(class_raw)
    when = parse_class_datetime(date_raw)

    base = f"{cleaned_class}-{when.date or 'unknown'}-{when.time or 'unknown'}-{location}-{teacher_name}"
    unique_id = f"{_WHITESPACE_RE.sub('_', base)}-{index}"

    attended = checked_in > 0
    return ProcessedRecord(
        teacher_name=teacher_name,
        teacher_email=teacher_email,
        cleaned_class=cleaned_class,
        location=location,
        unique_id=unique_id,
        date=when.date,
        class_time=when.time,
        day_of_week=when.day_of_week,
        period=when.period,
        total_time=total_time,
        total_checkins=checked_in,
        total_occurrences=1,
        total_revenue=paid,
        total_cancelled=late_cancelled,
        total_empty=0 if attended else 1,
        total_non_empty=1 if attended else 0,
        total_non_paid=non_paid,
        class_average_including_empty=checked_in,
        class_average_excluding_empty=checked_in if attended else 0,
        capacity=capacity,
        fill_rate=fill_rate(checked_in, capacity) if attended else 0.0,
        late_cancellation_rate=late_cancellation_rate(late_cancelled, checked_in),
        revenue_per_attendee=revenue_per_attendee(paid, checked_in),
    )


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

def aggregation_key(record: ProcessedRecord) -> str:
    """class|weekday|time|location|teacher, compared exactly."""
    return "|".join([
        record.cleaned_class,
        record.day_of_week,
        record.class_time,
        record.location,
        record.teacher_name,
    ])


def derive_metrics(totals: dict[str, Any]) -> dict[str, Any]:
    """Recompute ratio fields from summed totals (never from per-record ratios)."""
    checkins = totals["total_checkins"]
    occurrences = totals["total_occurrences"]
    non_empty = totals["total_non_empty"]
    cancelled = totals["total_cancelled"]
    capacity = totals["capacity"]

    avg_incl = round_half_up(safe_divide(checkins, occurrences))
    avg_excl = round_half_up(safe_divide(checkins, non_empty)) if non_empty > 0 else 0.0

    totals["class_average_including_empty"] = avg_incl
    totals["class_average_excluding_empty"] = avg_excl
    totals["fill_rate"] = fill_rate(avg_incl, capacity) if occurrences > 0 and capacity else 0.0
    totals["late_cancellation_rate"] = late_cancellation_rate(cancelled, checkins)
    totals["revenue_per_attendee"] = revenue_per_attendee(totals["total_revenue"], checkins)
    return totals


def aggregate_records(records: Iterable[ProcessedRecord]) -> list[AggregatedRecord]:
    """Fold occurrences into one aggregate per aggregation key (first-seen order)."""
    merged: dict[str, dict[str, Any]] = {}
    for record in records:
        key = aggregation_key(record)
        existing = merged.get(key)
        if existing is None:
            merged[key] = asdict(record)
            continue
        for name in SUMMED_FIELDS:
            existing[name] += getattr(record, name)

    return [AggregatedRecord(**derive_metrics(totals)) for totals in merged.values()]


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------

@dataclass
class IngestionResult:
    individual_classes: list[ProcessedRecord] = field(default_factory=list)
    aggregated: list[AggregatedRecord] = field(default_factory=list)
    skipped_rows: list[int] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.individual_classes)

    @property
    def skipped(self) -> int:
        return len(self.skipped_rows)

    @property
    def message(self) -> str:
        msg = (
            f"Successfully processed {self.processed:,} class records, "
            f"aggregated into {len(self.aggregated):,} unique groups"
        )
        if self.skipped:
            msg += f" ({self.skipped:,} rows skipped)"
        return msg


def process_raw_rows(rows: Iterable[Mapping[str, Any]], capacity: int = DEFAULT_CAPACITY) -> IngestionResult:
    """Build every row in isolation, then aggregate.

    A row that fails to build is logged and skipped; the rest of the batch
    still goes through.
    """
    result = IngestionResult()
    for idx, row in enumerate(rows):
        try:
            result.individual_classes.append(build_record(row, idx, capacity))
        except Exception as exc:
            logger.warning("Skipping row %d: %s: %s", idx, type(exc).__name__, exc)
            result.skipped_rows.append(idx)

    result.aggregated = aggregate_records(result.individual_classes)
    logger.info(result.message)
    return result
