"""Builders for raw export rows used across the test suite."""
from __future__ import annotations

import pandas as pd


def make_row(**overrides) -> dict:
    """One raw export row with sensible defaults."""
    row = {
        "Teacher First Name": "Anisha",
        "Teacher Last Name": "Shah",
        "Teacher Email": "anisha@example.com",
        "Class name": "Studio Barre 57",
        "Class date": "2024-01-15, 6:00 am",
        "Location": "Kwality House, Kemps Corner",
        "Total time (h)": "1",
        "Checked in": "5",
        "Comp": "1",
        "Late Cancelled": "1",
        "Paid": "₹5,000",
        "Non Paid Customers": "0",
    }
    row.update(overrides)
    return row


def rows_to_csv(rows: list[dict]) -> str:
    return pd.DataFrame(rows).to_csv(index=False)
