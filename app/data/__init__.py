"""Upload decoding, record normalization, aggregation and in-memory state."""
from .loader import load_upload, parse_csv_text, parse_zip_bytes
from .store import AnalyticsStore
from .schemas import AggregatedRecord, FilterState, GroupedRow, GroupingOption, ProcessedRecord
from .normalize import canonicalize_class, coerce_checked_in, coerce_number, parse_class_datetime
from .processor import aggregate_records, build_record, process_raw_rows
