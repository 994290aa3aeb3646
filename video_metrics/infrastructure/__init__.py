"""Infrastructure layer package."""

from .excel_repository import load_upload_records, load_upload_rows
from .report_exporter import save_summary_json

__all__ = ["load_upload_rows", "load_upload_records", "save_summary_json"]
