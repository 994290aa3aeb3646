"""Top-N and date-window selection helpers."""

from __future__ import annotations

import os
from datetime import timedelta
from typing import Any, Dict, List, Sequence

import polars as pl

from video_metrics.application.reporting.buckets import aggregate_buckets, filter_by_range
from video_metrics.domain.models import CanonicalRecord, DateRange
from video_metrics.ingestion import as_frame, frame_to_rows


def _positive_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {raw}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value}")
    return value


TOP_VIDEOS_LIMIT = _positive_int_env("VIDEO_METRICS_TOP_VIDEOS", 10)
MONTH_TOP_VIDEOS_LIMIT = _positive_int_env("VIDEO_METRICS_MONTH_TOP_VIDEOS", 5)


def top_videos(
    records: pl.DataFrame | Sequence[CanonicalRecord],
    date_range: DateRange | None = None,
    limit: int = TOP_VIDEOS_LIMIT,
) -> List[Dict[str, Any]]:
    """Highest-view records in the range; ties keep upload order."""
    scoped = filter_by_range(records, date_range)
    return frame_to_rows(scoped.sort("views", descending=True, maintain_order=True).head(limit))


def month_top_videos(
    records: pl.DataFrame | Sequence[CanonicalRecord],
    month: str,
    limit: int = MONTH_TOP_VIDEOS_LIMIT,
) -> List[Dict[str, Any]]:
    frame = as_frame(records)
    scoped = frame.filter(pl.col("publish_date").dt.strftime("%Y-%m") == pl.lit(month))
    return frame_to_rows(scoped.sort("views", descending=True, maintain_order=True).head(limit))


def unique_months(records: pl.DataFrame | Sequence[CanonicalRecord]) -> List[str]:
    frame = as_frame(records)
    return sorted(set(frame.get_column("publish_date").dt.strftime("%Y-%m").to_list()))


def data_date_range(records: pl.DataFrame | Sequence[CanonicalRecord]) -> DateRange | None:
    frame = as_frame(records)
    if frame.is_empty():
        return None
    dates = frame.get_column("publish_date")
    return DateRange(start=dates.min(), end=dates.max())


def default_ranges(records: pl.DataFrame | Sequence[CanonicalRecord]) -> Dict[str, DateRange] | None:
    """Initial views after an upload: current ``[min, mid]``, comparison ``[mid + 1 day, max]``."""
    frame = as_frame(records)
    data = data_date_range(frame)
    if data is None:
        return None
    dates = frame.get_column("publish_date").sort()
    mid = dates[frame.height // 2]
    return {
        "data": data,
        "current": DateRange(start=data.start, end=mid),
        "compare": DateRange(start=mid + timedelta(days=1), end=data.end),
    }


def peak_day(
    records: pl.DataFrame | Sequence[CanonicalRecord],
    date_range: DateRange | None = None,
) -> Dict[str, Any] | None:
    """Daily bucket with the most views (earliest wins ties)."""
    buckets = aggregate_buckets(records, date_range, "daily")
    if not buckets:
        return None
    best = buckets[0]
    for bucket in buckets[1:]:
        if bucket["views"] > best["views"]:
            best = bucket
    return best
