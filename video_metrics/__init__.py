"""Short-video performance aggregation and comparison engine."""

from .application import DashboardSession, DashboardView, build_dashboard_view, run_dashboard_pipeline
from .dates import DateParseError, normalize_date
from .domain import CanonicalRecord, DateRange
from .ingestion import parse_row, parse_rows, read_input_table

__all__ = [
    "CanonicalRecord",
    "DateRange",
    "DateParseError",
    "normalize_date",
    "parse_row",
    "parse_rows",
    "read_input_table",
    "DashboardSession",
    "DashboardView",
    "build_dashboard_view",
    "run_dashboard_pipeline",
]
