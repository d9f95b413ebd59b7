from __future__ import annotations

import threading

import pytest

from app.data.errors import IngestionBusyError, UnsupportedFileError
from app.data.processor import process_raw_rows
from app.data.schemas import DEFAULT_GROUPING, FilterState, GroupingOption


def test_new_store_is_empty(store):
    assert store.individual_classes == ()
    assert store.aggregated_data == ()
    assert store.filters == FilterState()
    assert store.selected_grouping is DEFAULT_GROUPING
    assert not store.is_loaded
    assert not store.is_busy
    assert store.source_name is None


def test_ingest_commits_both_record_sets(store, sample_csv_bytes):
    result = store.ingest(sample_csv_bytes, "momence-report.csv")

    assert result.processed == 5
    assert store.row_count() == 5
    assert len(store.aggregated_data) == 4
    assert store.source_name == "momence-report.csv"
    assert store.is_loaded
    assert not store.is_busy


def test_ingest_zip(store, sample_zip_bytes):
    store.ingest(sample_zip_bytes, "export.zip")
    assert store.row_count() == 5


def test_ingest_uses_store_capacity(sample_csv_bytes):
    from app.data.store import AnalyticsStore

    store = AnalyticsStore(capacity=20)
    store.ingest(sample_csv_bytes, "report.csv")
    assert {r.capacity for r in store.individual_classes} == {20}


def test_failed_ingest_leaves_state_untouched(loaded_store):
    before = loaded_store.individual_classes

    with pytest.raises(UnsupportedFileError):
        loaded_store.ingest(b"whatever", "export.pdf")

    assert loaded_store.individual_classes is before
    assert loaded_store.source_name == "momence-report.csv"
    assert not loaded_store.is_busy


def test_second_ingest_replaces_wholesale(loaded_store, sample_rows):
    from tests.factories import rows_to_csv

    loaded_store.ingest(rows_to_csv(sample_rows[:1]).encode(), "report.csv")
    assert loaded_store.row_count() == 1
    assert len(loaded_store.aggregated_data) == 1


def test_concurrent_ingest_is_rejected(store, sample_csv_bytes):
    # Hold the busy lock the way a running ingestion would
    store._busy.acquire()
    try:
        assert store.is_busy
        with pytest.raises(IngestionBusyError):
            store.ingest(sample_csv_bytes, "report.csv")
    finally:
        store._busy.release()

    assert not store.is_loaded


def test_ingest_from_threads_never_interleaves(store, sample_csv_bytes):
    outcomes: list[str] = []

    def run():
        try:
            store.ingest(sample_csv_bytes, "report.csv")
            outcomes.append("ok")
        except IngestionBusyError:
            outcomes.append("busy")

    threads = [threading.Thread(target=run) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert "ok" in outcomes
    assert store.row_count() == 5


def test_setters_replace_record_sets(store, sample_rows):
    result = process_raw_rows(sample_rows)
    store.set_individual_classes(result.individual_classes)
    store.set_aggregated_data(result.aggregated)

    assert store.individual_classes == tuple(result.individual_classes)
    assert store.aggregated_data == tuple(result.aggregated)

    store.set_individual_classes([])
    assert store.individual_classes == ()


def test_filters_are_returned_as_copies(store):
    store.set_filters(FilterState(locations=["Bandra"]))

    copy = store.filters
    copy.locations.append("Juhu")

    assert store.filters.locations == ["Bandra"]


def test_set_selected_grouping_accepts_strings(store):
    store.set_selected_grouping("day-time-class")
    assert store.selected_grouping is GroupingOption.DAY_TIME_CLASS

    with pytest.raises(ValueError):
        store.set_selected_grouping("nope")


def test_reset_clears_data_and_filters(loaded_store):
    loaded_store.set_filters(FilterState(text_search="barre"))

    loaded_store.reset()

    assert not loaded_store.is_loaded
    assert loaded_store.aggregated_data == ()
    assert loaded_store.filters.active_count == 0
    assert loaded_store.source_name is None
