"""Correlation, KPI totals and fan-health ratios over bucketed series."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Sequence

import polars as pl

from video_metrics.application.reporting.metrics import safe_pct, to_float
from video_metrics.domain.models import CanonicalRecord
from video_metrics.ingestion import as_frame

KPI_METRICS: List[str] = [
    "views",
    "likes",
    "comments",
    "shares",
    "net_fan_delta",
    "favorites",
    "recommendations",
]
CORRELATION_METRICS: List[str] = [
    "views",
    "interactions",
    "likes",
    "net_fan_delta",
    "completion_rate",
    "interaction_rate",
]


def pearson(a: Sequence[float], b: Sequence[float]) -> float:
    """Product-moment correlation; 0 for empty or zero-variance input."""
    n = min(len(a), len(b))
    if n == 0:
        return 0.0
    xs = [float(value) for value in a[:n]]
    ys = [float(value) for value in b[:n]]
    mean_x = sum(xs) / n
    mean_y = sum(ys) / n

    num = 0.0
    var_x = 0.0
    var_y = 0.0
    for x, y in zip(xs, ys):
        dx = x - mean_x
        dy = y - mean_y
        num += dx * dy
        var_x += dx * dx
        var_y += dy * dy

    denom = math.sqrt(var_x * var_y)
    if denom == 0:
        return 0.0
    return max(-1.0, min(1.0, num / denom))


def correlation_matrix(
    buckets: Sequence[Mapping[str, Any]],
    metrics: Sequence[str] = CORRELATION_METRICS,
) -> List[Dict[str, Any]]:
    """N x N cells (row-major, diagonal included) over the bucket series."""
    series = {metric: [to_float(bucket.get(metric)) for bucket in buckets] for metric in metrics}
    return [
        {"x": x_name, "y": y_name, "value": pearson(series[x_name], series[y_name])}
        for x_name in metrics
        for y_name in metrics
    ]


def sum_kpis(records: pl.DataFrame | Sequence[CanonicalRecord]) -> Dict[str, int]:
    frame = as_frame(records)
    totals = frame.select([pl.col(metric).sum().alias(metric) for metric in KPI_METRICS]).row(0, named=True)
    return {metric: int(totals.get(metric) or 0) for metric in KPI_METRICS}


def fan_health_rate(likes: Any, cumulative_fans: Any) -> float:
    return round(safe_pct(to_float(likes), to_float(cumulative_fans)), 2)


def fan_health_rows(buckets: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Attach ``health_rate`` (likes per 100 fans) and, for paired rows, ``compare_health_rate``."""
    rows: List[Dict[str, Any]] = []
    for bucket in buckets:
        row = dict(bucket)
        row["health_rate"] = fan_health_rate(bucket.get("likes"), bucket.get("cumulative_fans"))
        if "compare_likes" in bucket:
            row["compare_health_rate"] = fan_health_rate(
                bucket.get("compare_likes"),
                bucket.get("compare_cumulative_fans"),
            )
        rows.append(row)
    return rows


def average_of(rows: Sequence[Mapping[str, Any]], field: str) -> float:
    if not rows:
        return 0.0
    return round(sum(to_float(row.get(field)) for row in rows) / len(rows), 2)


def average_fan_health(rows: Sequence[Mapping[str, Any]]) -> float:
    return average_of(fan_health_rows(rows), "health_rate")


def average_interaction_rate(buckets: Sequence[Mapping[str, Any]]) -> float:
    return average_of(buckets, "interaction_rate")
