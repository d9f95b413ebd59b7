"""
Record, filter and grouping schemas for the class-attendance pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Optional


# Internal attribute → export/JSON column name. Exports keep the column names
# of the studio's earlier spreadsheets.
EXPORT_NAMES = {
    "teacher_name": "teacherName",
    "teacher_email": "teacherEmail",
    "cleaned_class": "cleanedClass",
    "location": "location",
    "unique_id": "uniqueID",
    "date": "date",
    "class_time": "classTime",
    "day_of_week": "dayOfWeek",
    "period": "period",
    "total_time": "totalTime",
    "total_checkins": "totalCheckins",
    "total_occurrences": "totalOccurrences",
    "total_revenue": "totalRevenue",
    "total_cancelled": "totalCancelled",
    "total_empty": "totalEmpty",
    "total_non_empty": "totalNonEmpty",
    "total_non_paid": "totalNonPaid",
    "class_average_including_empty": "classAverageIncludingEmpty",
    "class_average_excluding_empty": "classAverageExcludingEmpty",
    "capacity": "capacity",
    "fill_rate": "fillRate",
    "late_cancellation_rate": "lateCancellationRate",
    "revenue_per_attendee": "revenuePerAttendee",
    "group_key": "groupKey",
    "children": "children",
}

# Totals that are summed when occurrences are merged
SUMMED_FIELDS = (
    "total_checkins",
    "total_occurrences",
    "total_revenue",
    "total_cancelled",
    "total_empty",
    "total_non_empty",
    "total_non_paid",
)


@dataclass(frozen=True)
class ClassRecord:
    """Shared shape of occurrence and aggregate rows."""
    # Identity
    teacher_name: str
    teacher_email: str
    cleaned_class: str
    location: str
    unique_id: str
    # Time
    date: str
    class_time: str
    day_of_week: str
    period: str
    total_time: float
    # Metrics
    total_checkins: float
    total_occurrences: int
    total_revenue: float
    total_cancelled: float
    total_empty: int
    total_non_empty: int
    total_non_paid: float
    # Derived
    class_average_including_empty: float
    class_average_excluding_empty: float
    capacity: int
    fill_rate: float
    late_cancellation_rate: float
    revenue_per_attendee: float

    def to_dict(self) -> dict[str, Any]:
        """Export-named dict of every field."""
        return {EXPORT_NAMES[f.name]: getattr(self, f.name) for f in fields(self)}


class ProcessedRecord(ClassRecord):
    """One class occurrence (one raw row). Never mutated after creation."""


class AggregatedRecord(ClassRecord):
    """Sum of all occurrences sharing class, weekday, time, location and teacher."""


@dataclass(frozen=True)
class GroupedRow(ClassRecord):
    """An aggregate built at view time, carrying its drill-down children."""
    group_key: str = ""
    children: tuple[ProcessedRecord, ...] = ()

    def to_dict(self, include_children: bool = False) -> dict[str, Any]:
        data = super().to_dict()
        data["children"] = [c.to_dict() for c in self.children] if include_children else len(self.children)
        return data


class GroupingOption(str, Enum):
    CLEANED_CLASS = "cleanedClass"
    TEACHER_NAME = "teacherName"
    TEACHER_EMAIL = "teacherEmail"
    LOCATION = "location"
    UNIQUE_ID = "uniqueID"
    DATE = "date"
    CLASS_TIME = "classTime"
    DAY_OF_WEEK = "dayOfWeek"
    PERIOD = "period"
    TOTAL_TIME = "totalTime"
    TOTAL_CHECKINS = "totalCheckins"
    TOTAL_OCCURRENCES = "totalOccurrences"
    TOTAL_REVENUE = "totalRevenue"
    TOTAL_CANCELLED = "totalCancelled"
    TOTAL_EMPTY = "totalEmpty"
    TOTAL_NON_EMPTY = "totalNonEmpty"
    TOTAL_NON_PAID = "totalNonPaid"
    CLASS_AVERAGE_INCLUDING_EMPTY = "classAverageIncludingEmpty"
    CLASS_AVERAGE_EXCLUDING_EMPTY = "classAverageExcludingEmpty"
    CAPACITY = "capacity"
    FILL_RATE = "fillRate"
    LATE_CANCELLATION_RATE = "lateCancellationRate"
    REVENUE_PER_ATTENDEE = "revenuePerAttendee"
    # Compound dimensions
    DAY_TIME_CLASS_TEACHER = "day-time-class-teacher"
    DAY_TIME_CLASS = "day-time-class"
    TEACHER_CLASS = "teacher-class"
    LOCATION_CLASS = "location-class"
    TIME_CLASS = "time-class"

    @property
    def fields(self) -> tuple[str, ...]:
        """Record attributes that make up this dimension's key, in key order."""
        if self in COMPOUND_GROUPINGS:
            return COMPOUND_GROUPINGS[self]
        return (_ATTR_BY_EXPORT_NAME[self.value],)

    @property
    def is_compound(self) -> bool:
        return self in COMPOUND_GROUPINGS


_ATTR_BY_EXPORT_NAME = {v: k for k, v in EXPORT_NAMES.items()}

COMPOUND_GROUPINGS = {
    GroupingOption.DAY_TIME_CLASS_TEACHER: ("day_of_week", "class_time", "cleaned_class", "teacher_name"),
    GroupingOption.DAY_TIME_CLASS: ("day_of_week", "class_time", "cleaned_class"),
    GroupingOption.TEACHER_CLASS: ("teacher_name", "cleaned_class"),
    GroupingOption.LOCATION_CLASS: ("location", "cleaned_class"),
    GroupingOption.TIME_CLASS: ("class_time", "cleaned_class"),
}

DEFAULT_GROUPING = GroupingOption.CLEANED_CLASS


@dataclass
class FilterState:
    """Active view filters. Every clause is skipped while unset."""
    date_start: Optional[str] = None       # yyyy-MM-dd, inclusive
    date_end: Optional[str] = None         # yyyy-MM-dd, inclusive
    locations: list[str] = field(default_factory=list)
    teachers: list[str] = field(default_factory=list)
    classes: list[str] = field(default_factory=list)
    min_attendance: Optional[float] = None
    max_attendance: Optional[float] = None
    min_revenue: Optional[float] = None
    max_revenue: Optional[float] = None
    text_search: str = ""

    @property
    def active_count(self) -> int:
        """Number of active clauses, counted the way the filter bar badge shows them."""
        return (
            len(self.locations)
            + len(self.teachers)
            + len(self.classes)
            + (1 if self.date_start else 0)
            + (1 if self.min_attendance else 0)
            + (1 if self.min_revenue else 0)
            + (1 if self.text_search else 0)
        )
