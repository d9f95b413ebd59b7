# Shared pytest fixtures
from __future__ import annotations

import io
import zipfile

import pytest

from app.data.store import AnalyticsStore
from tests.factories import make_row, rows_to_csv


@pytest.fixture()
def sample_rows() -> list[dict]:
    return [
        make_row(),
        # Same slot one week later: aggregates with the first row
        make_row(**{"Class date": "2024-01-22, 6:00 am", "Checked in": "7", "Paid": "7000", "Late Cancelled": "0"}),
        make_row(**{
            "Teacher First Name": "Rohan",
            "Teacher Last Name": "Mehta",
            "Class name": "Cardio Barre Plus",
            "Class date": "2024-01-16, 7:30 pm",
            "Location": "Supreme HQ, Bandra",
            "Checked in": "0",
            "Paid": "0",
            "Comp": "0",
            "Late Cancelled": "2",
        }),
        make_row(**{
            "Class name": "powerCycle Express",
            "Class date": "2024-02-01, 8:00 am",
            "Checked in": "12",
            "Paid": "12,000",
        }),
        make_row(**{"Class date": "not a date", "Checked in": "3", "Paid": "1500"}),
    ]


@pytest.fixture()
def sample_csv_bytes(sample_rows) -> bytes:
    return rows_to_csv(sample_rows).encode("utf-8")


@pytest.fixture()
def sample_zip_bytes(sample_csv_bytes) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("readme.txt", "not data")
        zf.writestr("momence-teachers-payroll-report-combined.csv", sample_csv_bytes)
    return buffer.getvalue()


@pytest.fixture()
def store() -> AnalyticsStore:
    return AnalyticsStore(capacity=12)


@pytest.fixture()
def loaded_store(store, sample_csv_bytes) -> AnalyticsStore:
    store.ingest(sample_csv_bytes, "momence-report.csv")
    return store
