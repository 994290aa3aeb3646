"""AARRR lifecycle funnel over a filtered record set."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

import polars as pl

from video_metrics.application.reporting.metrics import fmt_rate
from video_metrics.application.reporting.statistics import sum_kpis
from video_metrics.domain.models import CanonicalRecord
from video_metrics.ingestion import as_frame

FUNNEL_FILTER_MODES: tuple[str, ...] = ("all", "quarterly", "monthly")


def use_recommendation_stage(totals: Dict[str, int]) -> bool:
    """Fourth stage switches to recommendations only when favorites are exactly 0."""
    return totals.get("favorites", 0) == 0 and totals.get("recommendations", 0) > 0


def funnel_stages(totals: Dict[str, int]) -> List[Dict[str, Any]]:
    if use_recommendation_stage(totals):
        fourth = {
            "name": "Recommendation",
            "framing": "recommendation",
            "metric": "recommendations",
            "value": totals.get("recommendations", 0),
        }
    else:
        fourth = {
            "name": "Revenue",
            "framing": "revenue",
            "metric": "favorites",
            "value": totals.get("favorites", 0),
        }

    return [
        {"name": "Acquisition", "framing": "acquisition", "metric": "views", "value": totals.get("views", 0)},
        {
            "name": "Activation",
            "framing": "activation",
            "metric": "likes+comments",
            "value": totals.get("likes", 0) + totals.get("comments", 0),
        },
        {
            "name": "Retention",
            "framing": "retention",
            "metric": "net_fan_delta",
            "value": totals.get("net_fan_delta", 0),
        },
        fourth,
        {"name": "Referral", "framing": "referral", "metric": "shares", "value": totals.get("shares", 0)},
    ]


def build_funnel(records: pl.DataFrame | Sequence[CanonicalRecord]) -> List[Dict[str, Any]]:
    """Five ordered stages with stage-over-stage and share-of-views rates.

    ``conversion_rate`` divides by the previous stage (the first stage by itself)
    and ``percent_of_views`` by the acquisition total; both are ``"0"`` when the
    denominator is not positive.
    """
    stages = funnel_stages(sum_kpis(records))
    acquisition = stages[0]["value"]

    funnel: List[Dict[str, Any]] = []
    for index, stage in enumerate(stages):
        previous = stage["value"] if index == 0 else stages[index - 1]["value"]
        row = dict(stage)
        row["conversion_rate"] = fmt_rate(stage["value"], previous)
        row["percent_of_views"] = fmt_rate(stage["value"], acquisition)
        funnel.append(row)
    return funnel


def quarter_label_expr() -> pl.Expr:
    return pl.format("{} Q{}", pl.col("publish_date").dt.year(), pl.col("publish_date").dt.quarter())


def month_label_expr() -> pl.Expr:
    return pl.col("publish_date").dt.strftime("%Y-%m")


def available_periods(records: pl.DataFrame | Sequence[CanonicalRecord]) -> Dict[str, List[str]]:
    """Quarter (``yyyy Q#``) and month (``yyyy-MM``) labels present in the data, newest first."""
    frame = as_frame(records)
    labels = frame.select(quarter_label_expr().alias("quarter"), month_label_expr().alias("month"))
    return {
        "quarters": sorted(set(labels.get_column("quarter").to_list()), reverse=True),
        "months": sorted(set(labels.get_column("month").to_list()), reverse=True),
    }


def filter_period(
    records: pl.DataFrame | Sequence[CanonicalRecord],
    mode: str = "all",
    period: str | None = None,
) -> pl.DataFrame:
    frame = as_frame(records)
    filter_mode = str(mode or "all").lower()
    if filter_mode not in FUNNEL_FILTER_MODES:
        raise ValueError(f"Unknown funnel filter mode: {mode!r}")
    if filter_mode == "all":
        return frame
    label_expr = quarter_label_expr() if filter_mode == "quarterly" else month_label_expr()
    return frame.filter(label_expr == pl.lit(str(period or "")))
