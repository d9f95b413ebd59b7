"""Styled .xlsx export of the analytics table."""
from .formatters import NUMBER_FORMATS, Column
from .writer import ClassWorkbook
