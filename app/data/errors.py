"""
Ingestion errors. Any of these aborts an upload before the store is touched.
"""
from __future__ import annotations


class IngestionError(Exception):
    """Base class for unrecoverable input errors."""


class UnsupportedFileError(IngestionError):
    """Raised when the upload is neither a .csv nor a .zip."""


class NoMatchingCsvError(IngestionError):
    """Raised when a ZIP holds no CSV whose name looks like an attendance export."""


class CsvParseError(IngestionError):
    """Raised when the CSV text cannot be parsed into rows."""


class IngestionBusyError(Exception):
    """Raised when an upload arrives while another one is still being processed."""
