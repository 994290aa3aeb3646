"""Infrastructure adapter for spreadsheet uploads."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from video_metrics.domain.models import CanonicalRecord
from video_metrics.ingestion import parse_rows, read_input_table

logger = logging.getLogger(__name__)


def load_upload_rows(path: str | Path, preferred_sheet: str | None = None) -> list[dict[str, Any]]:
    rows = read_input_table(path, preferred_sheet=preferred_sheet)
    logger.info("Read %d raw row(s) from %s", len(rows), path)
    return rows


def load_upload_records(path: str | Path, preferred_sheet: str | None = None) -> tuple[list[CanonicalRecord], int]:
    """Parse an upload file; returns the canonical records and the raw row count."""
    rows = load_upload_rows(path, preferred_sheet=preferred_sheet)
    return parse_rows(rows), len(rows)
