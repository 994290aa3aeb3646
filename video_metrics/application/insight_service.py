"""Pre-aggregated scalar KPIs handed to an external insight generator."""

from __future__ import annotations

from typing import Any, Dict, Sequence

import polars as pl

from video_metrics.application.reporting.buckets import filter_by_range
from video_metrics.application.reporting.funnel import build_funnel
from video_metrics.application.reporting.selectors import peak_day, top_videos
from video_metrics.application.reporting.statistics import sum_kpis
from video_metrics.domain.models import CanonicalRecord, DateRange

INSIGHT_TOP_VIDEOS = 3


def _record_mean(frame: pl.DataFrame, column: str) -> float:
    if frame.is_empty():
        return 0.0
    return round(float(frame.get_column(column).mean() or 0.0), 2)


def build_insight_summary(
    records: pl.DataFrame | Sequence[CanonicalRecord],
    date_range: DateRange | None = None,
) -> Dict[str, Any]:
    """Totals, per-record averages, funnel rates, top videos and peak day for one window."""
    scoped = filter_by_range(records, date_range)
    funnel = build_funnel(scoped)
    fourth = funnel[3]

    period = None
    if not scoped.is_empty():
        dates = scoped.get_column("date_label")
        period = {"start": dates.min(), "end": dates.max()}

    return {
        "record_count": scoped.height,
        "period": period,
        "totals": sum_kpis(scoped),
        "activation_total": funnel[1]["value"],
        "avg_interaction_rate": _record_mean(scoped, "interaction_rate"),
        "avg_completion_rate": _record_mean(scoped, "completion_rate"),
        "fourth_stage": {"framing": fourth["framing"], "metric": fourth["metric"], "value": fourth["value"]},
        "funnel_rates": {
            "acquisition_to_activation": funnel[1]["conversion_rate"],
            "activation_to_retention": funnel[2]["conversion_rate"],
            "retention_to_fourth_stage": funnel[3]["conversion_rate"],
            "fourth_stage_to_referral": funnel[4]["conversion_rate"],
        },
        "top_videos": top_videos(scoped, limit=INSIGHT_TOP_VIDEOS),
        "peak_day": peak_day(scoped),
    }
