"""
Studio Analytics — Configuration: constants, header aliases, file patterns.
"""
import os

# ---------------------------------------------------------------------------
# Capacity & time zone (env overrides for other studios)
# ---------------------------------------------------------------------------
# Fill-rate denominator. Same for every class until a per-location table exists.
DEFAULT_CAPACITY = int(os.environ.get("STUDIO_CAPACITY", "12"))
STUDIO_TIMEZONE = os.environ.get("STUDIO_TIMEZONE", "Asia/Kolkata")

# ---------------------------------------------------------------------------
# Upload discovery (keywords matched against names of CSVs inside a ZIP)
# ---------------------------------------------------------------------------
ZIP_CSV_KEYWORDS = ["momence", "payroll", "report"]
ACCEPTED_EXTENSIONS = (".csv", ".zip")

# ---------------------------------------------------------------------------
# Header aliases: logical field → raw export spellings, tried in order.
# Lookups are also case-insensitive, so only genuinely different spellings
# need listing here.
# ---------------------------------------------------------------------------
FIELD_ALIASES = {
    "teacher_first_name": ["Teacher First Name"],
    "teacher_last_name": ["Teacher Last Name"],
    "teacher_email": ["Teacher Email"],
    "class_name": ["Class name", "Class Name"],
    "class_date": ["Class date", "Class Date"],
    "location": ["Location"],
    "total_time": ["Total time (h)", "Time (h)", "Time"],
    "checked_in": ["Checked in"],
    "comps": ["Comp", "Comps", "Checked In Comps"],
    "late_cancelled": ["Late Cancelled", "Late cancellations"],
    "paid": ["Paid", "Paid Amount", "Total Revenue"],
    "non_paid": ["Non Paid Customers"],
}

UNKNOWN_LOCATION = "Unknown"
UNKNOWN_CLASS = "Unknown Class"
UNKNOWN_GROUP = "Unknown"

# ---------------------------------------------------------------------------
# Class-name canonicalization fuzzy fallback
# ---------------------------------------------------------------------------
CLASS_SYNONYMS = [
    ("Studio Barre 57", ["barre", "barre 57"]),
    ("Studio Cardio Barre", ["cardio", "cardio barre"]),
]
# Minimum difflib similarity ratio for a synonym to be accepted
FUZZY_MATCH_THRESHOLD = 0.7

# ---------------------------------------------------------------------------
# Currency (INR) compact abbreviations
# ---------------------------------------------------------------------------
CURRENCY_SYMBOL = "₹"
LAKH = 100_000
THOUSAND = 1_000

# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------
EXPORT_BASENAME = "studio-analytics"
# Internal-only GroupedRow fields never written to exports
EXPORT_EXCLUDED_FIELDS = {"children", "groupKey"}
