"""Current-vs-comparison pairing for side-by-side charts."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from video_metrics.application.reporting.metrics import delta_pct, to_float

# bucket field -> paired output field
COMPARE_FIELDS: Dict[str, str] = {
    "views": "compare_views",
    "likes": "compare_likes",
    "net_fan_delta": "compare_net_fan_delta",
    "cumulative_fans": "compare_cumulative_fans",
    "interactions": "compare_interactions",
    "completion_rate": "compare_completion_rate",
    "interaction_rate": "compare_interaction_rate",
}
MISSING_LABEL = "N/A"
KPI_COMPARISON_METRICS: List[str] = ["views", "likes", "net_fan_delta", "comments", "shares"]
MONTH_COMPARISON_METRICS: List[str] = ["views", "likes", "net_fan_delta"]


def align_comparison(
    current: Sequence[Mapping[str, Any]],
    compare: Sequence[Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """Pair ``current[i]`` with ``compare[i]`` by position, one row per current bucket.

    The pairing ignores bucket labels: ranges with different bucket counts line up
    by index, and current buckets past the end of ``compare`` get ``N/A``/``0``
    comparison fields. Extra comparison buckets are dropped.
    """
    if current is None or compare is None:
        raise TypeError("bucket sequences must not be None")

    rows: List[Dict[str, Any]] = []
    for index, bucket in enumerate(current):
        other = compare[index] if index < len(compare) else {}
        row = dict(bucket)
        row["compare_label"] = other.get("label") or MISSING_LABEL
        for field, paired in COMPARE_FIELDS.items():
            row[paired] = other.get(field) or 0
        rows.append(row)
    return rows


def kpi_comparison_rows(current_kpis: Mapping[str, Any], compare_kpis: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Headline card rows: totals of two ranges with their delta."""
    rows: List[Dict[str, Any]] = []
    for metric in KPI_COMPARISON_METRICS:
        curr = to_float(current_kpis.get(metric))
        prev = to_float(compare_kpis.get(metric))
        rows.append(
            {
                "metric": metric,
                "current": current_kpis.get(metric, 0),
                "compare": compare_kpis.get(metric, 0),
                "delta": curr - prev,
                "delta_pct": delta_pct(curr, prev),
            }
        )
    return rows


def month_comparison(monthly: Sequence[Mapping[str, Any]], month_a: str, month_b: str) -> List[Dict[str, Any]]:
    """Totals of two ``yyyy-MM`` months side by side; absent months read as zeros."""
    by_month = {str(row.get("month")): row for row in monthly}
    row_a = by_month.get(month_a, {})
    row_b = by_month.get(month_b, {})
    return [
        {"metric": metric, "a": row_a.get(metric, 0), "b": row_b.get(metric, 0)}
        for metric in MONTH_COMPARISON_METRICS
    ]
