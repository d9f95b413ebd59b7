"""
AnalyticsStore — in-memory state for one loaded attendance export.

Holds the processed occurrences, the canonical aggregates, the active filters
and the selected grouping. Each setter replaces its value wholesale; the only
writer of the record lists is a completed ingestion.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Optional

from app.config import DEFAULT_CAPACITY
from app.data.errors import IngestionBusyError
from app.data.loader import load_upload
from app.data.processor import IngestionResult, process_raw_rows
from app.data.schemas import (
    DEFAULT_GROUPING,
    AggregatedRecord,
    FilterState,
    GroupingOption,
    ProcessedRecord,
)

logger = logging.getLogger(__name__)


class AnalyticsStore:
    """Process-local analytics state with replace-on-write setters."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self.capacity = capacity
        self._individual_classes: tuple[ProcessedRecord, ...] = ()
        self._aggregated: tuple[AggregatedRecord, ...] = ()
        self._filters = FilterState()
        self._grouping = DEFAULT_GROUPING
        self._source_name: Optional[str] = None
        self._busy = threading.Lock()

    # ------------------------------------------------------------------
    # Record sets
    # ------------------------------------------------------------------

    @property
    def individual_classes(self) -> tuple[ProcessedRecord, ...]:
        return self._individual_classes

    @property
    def aggregated_data(self) -> tuple[AggregatedRecord, ...]:
        return self._aggregated

    def set_individual_classes(self, records: list[ProcessedRecord]) -> None:
        self._individual_classes = tuple(records)

    def set_aggregated_data(self, records: list[AggregatedRecord]) -> None:
        self._aggregated = tuple(records)

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------

    @property
    def filters(self) -> FilterState:
        """A copy of the active filters; change them with set_filters()."""
        return replace(
            self._filters,
            locations=list(self._filters.locations),
            teachers=list(self._filters.teachers),
            classes=list(self._filters.classes),
        )

    def set_filters(self, filters: FilterState) -> None:
        self._filters = filters

    @property
    def selected_grouping(self) -> GroupingOption:
        return self._grouping

    def set_selected_grouping(self, grouping: GroupingOption | str) -> None:
        self._grouping = GroupingOption(grouping)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    @property
    def is_busy(self) -> bool:
        return self._busy.locked()

    @property
    def is_loaded(self) -> bool:
        return bool(self._individual_classes)

    @property
    def source_name(self) -> Optional[str]:
        return self._source_name

    def ingest(self, content: bytes, filename: str) -> IngestionResult:
        """Decode, process and commit an uploaded export.

        Decoding errors propagate before anything is committed. A second call
        while one is running raises IngestionBusyError.
        """
        if not self._busy.acquire(blocking=False):
            raise IngestionBusyError("Another file is still being processed")
        try:
            rows = load_upload(content, filename)
            logger.info("Loaded %d raw rows from %s", len(rows), filename)
            result = process_raw_rows(rows, self.capacity)
            self.set_individual_classes(result.individual_classes)
            self.set_aggregated_data(result.aggregated)
            self._source_name = filename
            return result
        finally:
            self._busy.release()

    def reset(self) -> None:
        """Drop all data and clear filters."""
        self._individual_classes = ()
        self._aggregated = ()
        self._filters = FilterState()
        self._source_name = None

    def row_count(self) -> int:
        return len(self._individual_classes)
