"""
Field coercion, class-name canonicalization, date/time normalization.
"""
from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Any, Callable, Optional

import pandas as pd

from app.config import (
    CLASS_SYNONYMS,
    FIELD_ALIASES,
    FUZZY_MATCH_THRESHOLD,
    STUDIO_TIMEZONE,
    UNKNOWN_CLASS,
)


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return pd.api.types.is_scalar(value) and pd.isna(value)


def coerce_number(value: Any) -> float:
    """Coerce a loosely-typed cell to a finite number; anything unusable is 0.

    Currency symbols, thousands separators and units are stripped, so
    "₹1,234.50" → 1234.5. Integral results come back as int.
    """
    if _is_blank(value) or isinstance(value, bool):
        return 0
    cleaned = _NON_NUMERIC_RE.sub("", str(value))
    if not cleaned:
        return 0
    try:
        number = float(cleaned)
    except ValueError:
        return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def coerce_checked_in(value: Any) -> float:
    """Check-in cell: "Yes"/"y..." → 1, blank → 0, otherwise numeric."""
    if _is_blank(value):
        return 0
    if isinstance(value, str) and value.strip().lower().startswith("y"):
        return 1
    return coerce_number(value)


# ---------------------------------------------------------------------------
# Header-tolerant lookup
# ---------------------------------------------------------------------------

def lookup(row: Mapping[str, Any], field_name: str, default: Any = "") -> Any:
    """First non-blank cell among the aliases of ``field_name``.

    Exact header spellings are tried first, then a case-insensitive match.
    """
    aliases = FIELD_ALIASES[field_name]
    for alias in aliases:
        value = row.get(alias)
        if not _is_blank(value):
            return value

    lowered = {str(k).strip().lower(): v for k, v in row.items()}
    for alias in aliases:
        value = lowered.get(alias.lower())
        if not _is_blank(value):
            return value
    return default


# ---------------------------------------------------------------------------
# Class-name canonicalization
# ---------------------------------------------------------------------------

def _family(base: str) -> Callable[[str], str]:
    """Resolver for a family with an Express variant."""
    return lambda name: f"{base} Express" if "express" in name else base


def _fixed(label: str) -> Callable[[str], str]:
    return lambda name: label


def _cardio_barre(name: str) -> str:
    if "plus" in name:
        return "Studio Cardio Barre Plus"
    if "express" in name:
        return "Studio Cardio Barre Express"
    return "Studio Cardio Barre"


# First match wins
CLASS_RULES: list[tuple[re.Pattern, Callable[[str], str]]] = [
    (re.compile(r"barre\s*57"), _family("Studio Barre 57")),
    (re.compile(r"\bmat\b"), _family("Studio Mat 57")),
    (re.compile(r"trainer(?:'|’)?s?\b"), _family("Studio Trainer's Choice")),
    (re.compile(r"cardio\s*barre|studio cardio"), _cardio_barre),
    (re.compile(r"back\s*body"), _family("Studio Back Body Blaze")),
    (re.compile(r"\bfit\b"), _family("Studio FIT")),
    (re.compile(r"power\s*cycle"), _family("Studio powerCycle")),
    (re.compile(r"amped"), _family("Studio Amped Up!")),
    (re.compile(r"sweat"), _family("Studio SWEAT In 30")),
    (re.compile(r"foundation"), _family("Studio Foundations")),
    (re.compile(r"recovery"), _family("Studio Recovery")),
    (re.compile(r"pre[/\-\s]?post|prenatal|postnatal"), _fixed("Studio Pre/Post Natal")),
    (re.compile(r"hiit"), _family("Studio HIIT")),
    (
        re.compile(r"host|bridal|workshop|community|outdoor|birthday|wework|pop|raheja|rugby|olympics"),
        _fixed("Studio Hosted Class"),
    ),
]


def _fuzzy_class(name: str) -> Optional[str]:
    """Best synonym label for ``name`` if its similarity clears the threshold."""
    best_label = None
    best_score = 0.0
    for label, variants in CLASS_SYNONYMS:
        for variant in variants:
            score = SequenceMatcher(None, name, variant).ratio()
            if score > best_score:
                best_score = score
                best_label = label
    if best_score >= FUZZY_MATCH_THRESHOLD:
        return best_label
    return None


def canonicalize_class(raw_name: Any) -> str:
    """Map a free-text class name onto the studio's canonical class labels.

    Unrecognised names pass through trimmed, with their original casing.
    """
    raw = "" if _is_blank(raw_name) else str(raw_name)
    name = raw.strip().lower()
    if not name:
        return UNKNOWN_CLASS

    for pattern, resolve in CLASS_RULES:
        if pattern.search(name):
            return resolve(name)

    fuzzy = _fuzzy_class(name)
    if fuzzy:
        return fuzzy

    return raw.strip()


# ---------------------------------------------------------------------------
# Date/time normalization
# ---------------------------------------------------------------------------

# Tried in order for "date, time" inputs; SQL-style first, then 12-hour clock
_PAIR_FORMATS = [
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%Y-%m-%d %I:%M %p",
]


@dataclass(frozen=True)
class ClassDateTime:
    iso: Optional[str]
    time: str
    date: str
    day_of_week: str
    period: str


EMPTY_DATETIME = ClassDateTime(iso=None, time="", date="", day_of_week="", period="")


def _to_local(ts: pd.Timestamp) -> pd.Timestamp:
    if ts.tzinfo is None:
        return ts.tz_localize(STUDIO_TIMEZONE)
    return ts.tz_convert(STUDIO_TIMEZONE)


def _parse_pair(date_part: str, time_part: str) -> Optional[pd.Timestamp]:
    text = f"{date_part} {time_part}".strip()
    for fmt in _PAIR_FORMATS:
        ts = pd.to_datetime(text, format=fmt, errors="coerce")
        if not pd.isna(ts):
            return ts
    return None


def _parse_iso(text: str) -> Optional[pd.Timestamp]:
    if not text:
        return None
    ts = pd.to_datetime(text, format="ISO8601", errors="coerce")
    if pd.isna(ts):
        return None
    return ts


def parse_class_datetime(raw: Any) -> ClassDateTime:
    """Decompose a raw class date into studio-local calendar fields.

    Accepts "2024-01-15, 6:00 am" style pairs or a single ISO-8601 string.
    Anything unparseable yields empty fields rather than an error.
    """
    text = "" if _is_blank(raw) else str(raw)
    parts = [p.strip() for p in text.split(",")]

    try:
        if len(parts) >= 2:
            ts = _parse_pair(parts[0], parts[1])
        else:
            ts = _parse_iso(text.strip())
        if ts is None:
            return EMPTY_DATETIME
        ts = _to_local(ts)
    except (ValueError, TypeError, OverflowError):
        return EMPTY_DATETIME

    hour = ts.hour % 12 or 12
    meridiem = "AM" if ts.hour < 12 else "PM"
    return ClassDateTime(
        iso=ts.isoformat(),
        time=f"{hour}:{ts.minute:02d} {meridiem}",
        date=ts.strftime("%Y-%m-%d"),
        day_of_week=ts.strftime("%A"),
        period=ts.strftime("%b-%y"),
    )
