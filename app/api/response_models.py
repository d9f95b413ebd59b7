"""
Pydantic request/response schemas for the API.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from app.data.schemas import FilterState


class HealthResponse(BaseModel):
    status: str
    rows: int
    groups: int
    busy: bool
    source: Optional[str] = None


class UploadResponse(BaseModel):
    status: str
    file: str
    processed: int
    skipped: int
    groups: int
    message: str


class FilterOptionsResponse(BaseModel):
    locations: list[str]
    teachers: list[str]
    classes: list[str]


class DateRange(BaseModel):
    start: Optional[str] = Field(None, description="YYYY-MM-DD, inclusive")
    end: Optional[str] = Field(None, description="YYYY-MM-DD, inclusive")


class FiltersModel(BaseModel):
    """Wire form of the active filters (camelCase, as the dashboard sends them)."""
    dateRange: DateRange = Field(default_factory=DateRange)
    locations: list[str] = Field(default_factory=list)
    teachers: list[str] = Field(default_factory=list)
    classes: list[str] = Field(default_factory=list)
    minAttendance: Optional[float] = None
    maxAttendance: Optional[float] = None
    minRevenue: Optional[float] = None
    maxRevenue: Optional[float] = None
    textSearch: str = ""

    def to_state(self) -> FilterState:
        return FilterState(
            date_start=self.dateRange.start,
            date_end=self.dateRange.end,
            locations=list(self.locations),
            teachers=list(self.teachers),
            classes=list(self.classes),
            min_attendance=self.minAttendance,
            max_attendance=self.maxAttendance,
            min_revenue=self.minRevenue,
            max_revenue=self.maxRevenue,
            text_search=self.textSearch,
        )

    @classmethod
    def from_state(cls, state: FilterState) -> "FiltersModel":
        return cls(
            dateRange=DateRange(start=state.date_start, end=state.date_end),
            locations=state.locations,
            teachers=state.teachers,
            classes=state.classes,
            minAttendance=state.min_attendance,
            maxAttendance=state.max_attendance,
            minRevenue=state.min_revenue,
            maxRevenue=state.max_revenue,
            textSearch=state.text_search,
        )


class FiltersResponse(BaseModel):
    filters: FiltersModel
    active_count: int


class GroupingRequest(BaseModel):
    grouping: str


class GroupingResponse(BaseModel):
    grouping: str
