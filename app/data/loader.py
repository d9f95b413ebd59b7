"""
Upload decoding: flat CSV or ZIP archive → raw attendance rows.
"""
from __future__ import annotations

import io
import logging
import zipfile
from typing import Any

import pandas as pd

from app.config import ACCEPTED_EXTENSIONS, ZIP_CSV_KEYWORDS
from app.data.errors import CsvParseError, IngestionError, NoMatchingCsvError, UnsupportedFileError

logger = logging.getLogger(__name__)

RawRow = dict[str, Any]


# ---------------------------------------------------------------------------
# CSV text
# ---------------------------------------------------------------------------

def _decode(content: bytes, name: str) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise CsvParseError(f"{name} is not UTF-8 text: {exc}") from exc


def parse_csv_text(text: str, name: str = "upload.csv") -> list[RawRow]:
    """Parse CSV text with a header row into a list of row dicts.

    Every cell is kept as text (coercion happens per field later), headers are
    trimmed and blank lines skipped. A line with more cells than the header is
    cut to the header width and logged; it does not fail the file.
    """
    ragged = 0

    def _truncate(cells: list[str]) -> list[str]:
        nonlocal ragged
        ragged += 1
        logger.warning(
            "%s: row with %d cells truncated to %d header columns: %s",
            name, len(cells), width, cells,
        )
        return cells[:width]

    try:
        width = len(pd.read_csv(io.StringIO(text), nrows=0).columns)
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_truncate,
        )
    except pd.errors.EmptyDataError as exc:
        raise CsvParseError(f"{name} has no header row") from exc
    except (pd.errors.ParserError, ValueError) as exc:
        raise CsvParseError(f"Could not parse {name}: {exc}") from exc

    if ragged:
        logger.warning("%s: %d ragged row(s) truncated", name, ragged)
    df.columns = [str(c).strip() for c in df.columns]
    return df.fillna("").to_dict(orient="records")


# ---------------------------------------------------------------------------
# ZIP archive
# ---------------------------------------------------------------------------

def find_zip_csv(names: list[str], keywords: list[str] | None = None) -> str:
    """Pick the first CSV member whose name contains an export keyword."""
    if keywords is None:
        keywords = ZIP_CSV_KEYWORDS

    for name in names:
        lower = name.lower()
        if lower.endswith("/") or lower.startswith("__macosx/"):
            continue
        if lower.endswith(".csv") and any(kw in lower for kw in keywords):
            return name
    raise NoMatchingCsvError(
        f"No valid CSV file found in ZIP (expected a name containing one of: {', '.join(keywords)})"
    )


def parse_zip_bytes(content: bytes, name: str = "upload.zip") -> list[RawRow]:
    """Open a ZIP export and parse the attendance CSV inside it."""
    try:
        with zipfile.ZipFile(io.BytesIO(content)) as zf:
            member = find_zip_csv(zf.namelist())
            logger.info("Reading %s from %s", member, name)
            text = _decode(zf.read(member), member)
    except zipfile.BadZipFile as exc:
        raise IngestionError(f"{name} is not a valid ZIP archive") from exc
    return parse_csv_text(text, member)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def load_upload(content: bytes, filename: str) -> list[RawRow]:
    """Decode an uploaded file by extension. Raises IngestionError subclasses."""
    lower = (filename or "").lower()
    if lower.endswith(".zip"):
        return parse_zip_bytes(content, filename)
    if lower.endswith(".csv"):
        return parse_csv_text(_decode(content, filename), filename)
    raise UnsupportedFileError(
        f"Please upload a ZIP or CSV file (got '{filename}', accepted: {', '.join(ACCEPTED_EXTENSIONS)})"
    )
