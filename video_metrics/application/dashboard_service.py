"""Application service composing the dashboard's derived views."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import polars as pl

from video_metrics.application.insight_service import build_insight_summary
from video_metrics.application.reporting.alignment import (
    align_comparison,
    kpi_comparison_rows,
    month_comparison,
)
from video_metrics.application.reporting.buckets import aggregate_buckets, filter_by_range, monthly_totals
from video_metrics.application.reporting.funnel import available_periods, build_funnel, filter_period
from video_metrics.application.reporting.selectors import default_ranges, month_top_videos, top_videos, unique_months
from video_metrics.application.reporting.statistics import (
    average_fan_health,
    average_interaction_rate,
    correlation_matrix,
    fan_health_rows,
    sum_kpis,
)
from video_metrics.domain.models import CanonicalRecord, DateRange, Granularity, normalize_granularity
from video_metrics.ingestion import as_frame, empty_record_frame, parse_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardView:
    current_range: DateRange
    compare_range: DateRange
    granularity: Granularity
    current_kpis: dict[str, int]
    compare_kpis: dict[str, int]
    kpi_comparison: list[dict[str, Any]]
    detail_trend: list[dict[str, Any]]
    correlation: list[dict[str, Any]]
    fan_health: list[dict[str, Any]]
    average_fan_health: float
    average_interaction_rate: float
    top_videos: list[dict[str, Any]]
    funnel: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_range": self.current_range.to_dict(),
            "compare_range": self.compare_range.to_dict(),
            "granularity": self.granularity,
            "current_kpis": self.current_kpis,
            "compare_kpis": self.compare_kpis,
            "kpi_comparison": self.kpi_comparison,
            "detail_trend": self.detail_trend,
            "correlation": self.correlation,
            "fan_health": self.fan_health,
            "average_fan_health": self.average_fan_health,
            "average_interaction_rate": self.average_interaction_rate,
            "top_videos": self.top_videos,
            "funnel": self.funnel,
        }


def build_dashboard_view(
    records: pl.DataFrame | Sequence[CanonicalRecord],
    current_range: DateRange,
    compare_range: DateRange,
    granularity: Granularity = "daily",
) -> DashboardView:
    """Derive every chart dataset for one (current range, comparison range, granularity) choice."""
    frame = as_frame(records)
    mode = normalize_granularity(granularity)

    current_frame = filter_by_range(frame, current_range)
    compare_frame = filter_by_range(frame, compare_range)
    current_kpis = sum_kpis(current_frame)
    compare_kpis = sum_kpis(compare_frame)

    detail_trend = align_comparison(
        aggregate_buckets(current_frame, current_range, mode),
        aggregate_buckets(compare_frame, compare_range, mode),
    )
    health = fan_health_rows(detail_trend)

    return DashboardView(
        current_range=current_range,
        compare_range=compare_range,
        granularity=mode,
        current_kpis=current_kpis,
        compare_kpis=compare_kpis,
        kpi_comparison=kpi_comparison_rows(current_kpis, compare_kpis),
        detail_trend=detail_trend,
        correlation=correlation_matrix(detail_trend),
        fan_health=health,
        average_fan_health=average_fan_health(detail_trend),
        average_interaction_rate=average_interaction_rate(detail_trend),
        top_videos=top_videos(current_frame),
        funnel=build_funnel(current_frame),
    )


class DashboardSession:
    """In-memory upload state with derived views memoized on their inputs."""

    def __init__(self, records: pl.DataFrame | Sequence[CanonicalRecord] | None = None) -> None:
        self._frame = empty_record_frame() if records is None else as_frame(records)
        self._views: Dict[tuple[Any, ...], DashboardView] = {}

    @property
    def frame(self) -> pl.DataFrame:
        return self._frame

    @property
    def record_count(self) -> int:
        return self._frame.height

    def load_rows(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Replace the session data with a freshly parsed upload; returns the kept row count."""
        self.replace_records(parse_rows(rows))
        return self.record_count

    def replace_records(self, records: pl.DataFrame | Sequence[CanonicalRecord]) -> None:
        self._frame = as_frame(records)
        self._views.clear()
        logger.info("Session loaded with %d record(s)", self._frame.height)

    def default_ranges(self) -> Dict[str, DateRange] | None:
        return default_ranges(self._frame)

    def available_months(self) -> List[str]:
        """``yyyy-MM`` labels for the month pickers, oldest first."""
        return unique_months(self._frame)

    def view(
        self,
        current_range: DateRange | None = None,
        compare_range: DateRange | None = None,
        granularity: Granularity = "daily",
    ) -> DashboardView | None:
        if current_range is None or compare_range is None:
            defaults = self.default_ranges()
            if defaults is None:
                return None
            current_range = current_range or defaults["current"]
            compare_range = compare_range or defaults["compare"]

        key = (current_range, compare_range, normalize_granularity(granularity))
        cached = self._views.get(key)
        if cached is not None:
            return cached

        logger.debug("Recomputing dashboard view for %s", key)
        view = build_dashboard_view(self._frame, current_range, compare_range, granularity)
        self._views[key] = view
        return view

    def trend(self, date_range: DateRange | None, granularity: Granularity = "daily") -> List[Dict[str, Any]]:
        return aggregate_buckets(self._frame, date_range, granularity)

    def funnel(self, mode: str = "all", period: str | None = None) -> List[Dict[str, Any]]:
        return build_funnel(filter_period(self._frame, mode, period))

    def funnel_periods(self) -> Dict[str, List[str]]:
        return available_periods(self._frame)

    def month_comparison(self, month_a: str, month_b: str) -> List[Dict[str, Any]]:
        return month_comparison(monthly_totals(self._frame), month_a, month_b)

    def month_top_videos(self, month: str) -> List[Dict[str, Any]]:
        return month_top_videos(self._frame, month)

    def insight_summary(self, date_range: DateRange | None = None) -> Dict[str, Any]:
        return build_insight_summary(self._frame, date_range)
