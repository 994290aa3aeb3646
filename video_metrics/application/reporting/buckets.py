"""Range filtering and time-bucket aggregation."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Sequence

import polars as pl

from video_metrics.application.reporting.metrics import safe_mean_expr
from video_metrics.domain.models import CanonicalRecord, DateRange, Granularity, normalize_granularity
from video_metrics.ingestion import as_frame

SUM_METRICS: List[str] = [
    "views",
    "likes",
    "comments",
    "shares",
    "favorites",
    "net_fan_delta",
    "interactions",
]
STOCK_METRIC = "cumulative_fans"
MEAN_METRICS: List[str] = ["completion_rate", "interaction_rate"]
BUCKET_COLUMNS: List[str] = ["label", "sort_key", *SUM_METRICS, STOCK_METRIC, *MEAN_METRICS, "count"]


def filter_by_range(
    records: pl.DataFrame | Sequence[CanonicalRecord],
    date_range: DateRange | None,
) -> pl.DataFrame:
    """Records whose publish date lies in ``[start 00:00, end 23:59:59.999]``."""
    frame = as_frame(records)
    if date_range is None:
        return frame
    instant = pl.col("publish_date").cast(pl.Datetime("us"))
    return frame.filter(
        (instant >= pl.lit(date_range.start_instant)) & (instant <= pl.lit(date_range.end_instant))
    )


def bucket_key_expr(granularity: Granularity) -> pl.Expr:
    published = pl.col("publish_date")
    mode = normalize_granularity(granularity)
    if mode == "daily":
        return published.dt.strftime("%Y-%m-%d")
    if mode == "weekly":
        return published.dt.truncate("1w").dt.strftime("%Y-%m-%d")
    if mode == "monthly":
        return published.dt.strftime("%Y-%m")
    return pl.format("{}-Q{}", published.dt.year(), published.dt.quarter())


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def week_label(start: date) -> str:
    iso_year, iso_week, _ = start.isocalendar()
    end = start + timedelta(days=6)
    return f"{iso_year} 第{iso_week:02d}周 ({start:%m.%d}-{end:%m.%d})"


def week_starts(date_range: DateRange) -> List[date]:
    """Monday of every ISO week touching the range, including empty ones."""
    cursor = week_start(date_range.start)
    last = week_start(date_range.end)
    starts: List[date] = []
    while cursor <= last:
        starts.append(cursor)
        cursor += timedelta(days=7)
    return starts


def _bucket_aggregations() -> list[pl.Expr]:
    return (
        [pl.col(metric).sum().alias(metric) for metric in SUM_METRICS]
        + [pl.col(STOCK_METRIC).max().alias(STOCK_METRIC)]
        + [pl.col(metric).sum().alias(f"{metric}_sum") for metric in MEAN_METRICS]
        + [pl.len().cast(pl.Int64).alias("count")]
    )


def _weekly_skeleton(date_range: DateRange) -> pl.DataFrame:
    starts = week_starts(date_range)
    return pl.DataFrame(
        {
            "sort_key": [start.strftime("%Y-%m-%d") for start in starts],
            "label": [week_label(start) for start in starts],
        },
        schema={"sort_key": pl.Utf8, "label": pl.Utf8},
    )


def _data_range(frame: pl.DataFrame) -> DateRange | None:
    if frame.is_empty():
        return None
    bounds = frame.select(pl.col("publish_date").min().alias("lo"), pl.col("publish_date").max().alias("hi")).row(0)
    return DateRange(start=bounds[0], end=bounds[1])


def aggregate_buckets(
    records: pl.DataFrame | Sequence[CanonicalRecord],
    date_range: DateRange | None,
    granularity: Granularity,
) -> List[Dict[str, Any]]:
    """Group records into ordered day/week/month/quarter buckets.

    Flow metrics are summed, ``cumulative_fans`` keeps the bucket maximum and the
    rate columns become per-record means rounded to two decimals. Weekly output is
    dense: every week of ``date_range`` appears, empty weeks as zeros. With no
    range the whole record set is used.
    """
    mode = normalize_granularity(granularity)
    scoped = filter_by_range(records, date_range)

    grouped = (
        scoped.with_columns(bucket_key_expr(mode).alias("sort_key"))
        .group_by("sort_key", maintain_order=True)
        .agg(_bucket_aggregations())
    )

    if mode == "weekly":
        seed_range = date_range or _data_range(scoped)
        if seed_range is None:
            return []
        grouped = _weekly_skeleton(seed_range).join(grouped, on="sort_key", how="left").with_columns(
            [pl.col(column).fill_null(0) for column in [*SUM_METRICS, STOCK_METRIC, "count"]]
            + [pl.col(f"{metric}_sum").fill_null(0.0) for metric in MEAN_METRICS]
        )
    else:
        grouped = grouped.with_columns(pl.col("sort_key").alias("label"))

    finalized = grouped.with_columns(
        [safe_mean_expr(pl.col(f"{metric}_sum"), pl.col("count")).alias(metric) for metric in MEAN_METRICS]
    )
    return finalized.sort("sort_key").select(BUCKET_COLUMNS).to_dicts()


def monthly_totals(records: pl.DataFrame | Sequence[CanonicalRecord]) -> List[Dict[str, Any]]:
    """Whole-dataset month totals for views, likes and net fan growth."""
    frame = as_frame(records)
    return (
        frame.with_columns(pl.col("publish_date").dt.strftime("%Y-%m").alias("month"))
        .group_by("month", maintain_order=True)
        .agg([pl.col(metric).sum().alias(metric) for metric in ("views", "likes", "net_fan_delta")])
        .sort("month")
        .to_dicts()
    )
