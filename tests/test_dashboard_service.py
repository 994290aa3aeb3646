"""Composed dashboard views, the memoizing session and insight summaries."""

from __future__ import annotations

from datetime import date

import pytest

from video_metrics.application.dashboard_service import DashboardSession, build_dashboard_view
from video_metrics.application.insight_service import build_insight_summary
from video_metrics.domain.models import CanonicalRecord, DateRange

from conftest import make_record

CURRENT = DateRange.from_strings("2024-01-15", "2024-01-21")
COMPARE = DateRange.from_strings("2024-01-01", "2024-01-07")


class TestBuildDashboardView:
    def test_kpis_and_trend(self, january_records: list[CanonicalRecord]) -> None:
        view = build_dashboard_view(january_records, CURRENT, COMPARE, "daily")
        assert view.current_kpis["views"] == 250
        assert view.compare_kpis["views"] == 400
        assert [row["label"] for row in view.detail_trend] == ["2024-01-16", "2024-01-21"]
        assert [row["compare_label"] for row in view.detail_trend] == ["2024-01-02", "2024-01-05"]
        assert view.kpi_comparison[0]["delta_pct"] == -37.5

    def test_derived_sections(self, january_records: list[CanonicalRecord]) -> None:
        view = build_dashboard_view(january_records, CURRENT, COMPARE, "weekly")
        assert len(view.detail_trend) == 1
        assert view.detail_trend[0]["compare_views"] == 400
        assert len(view.correlation) == 36
        assert view.fan_health[0]["health_rate"] == pytest.approx(4.39)
        assert [row["title"] for row in view.top_videos] == ["w3-a", "w3-b"]
        assert view.funnel[0]["value"] == 250

    def test_to_dict_is_plain(self, january_records: list[CanonicalRecord]) -> None:
        payload = build_dashboard_view(january_records, CURRENT, COMPARE).to_dict()
        assert payload["current_range"] == {"start": "2024-01-15", "end": "2024-01-21"}
        assert payload["granularity"] == "daily"

    def test_bad_granularity(self, january_records: list[CanonicalRecord]) -> None:
        with pytest.raises(ValueError):
            build_dashboard_view(january_records, CURRENT, COMPARE, "yearly")


class TestDashboardSession:
    def test_empty_session_has_no_view(self) -> None:
        session = DashboardSession()
        assert session.record_count == 0
        assert session.view() is None

    def test_views_are_memoized(self, january_records: list[CanonicalRecord]) -> None:
        session = DashboardSession(january_records)
        first = session.view(CURRENT, COMPARE, "weekly")
        assert session.view(CURRENT, COMPARE, "Weekly") is first
        assert session.view(CURRENT, COMPARE, "daily") is not first

    def test_new_upload_invalidates(self, january_records: list[CanonicalRecord]) -> None:
        session = DashboardSession(january_records)
        before = session.view(CURRENT, COMPARE)
        kept = session.load_rows([{"Date": "2024-01-16", "Views": 7}])
        after = session.view(CURRENT, COMPARE)
        assert kept == 1
        assert after is not before
        assert after.current_kpis["views"] == 7

    def test_default_ranges_fill_missing(self, january_records: list[CanonicalRecord]) -> None:
        view = DashboardSession(january_records).view()
        assert view is not None
        assert view.current_range == DateRange(date(2024, 1, 2), date(2024, 1, 16))
        assert view.compare_range == DateRange(date(2024, 1, 17), date(2024, 1, 21))

    def test_secondary_views(self, january_records: list[CanonicalRecord]) -> None:
        session = DashboardSession([*january_records, make_record(date(2024, 2, 1), views=9, title="feb")])
        assert session.month_comparison("2024-01", "2024-02")[0] == {"metric": "views", "a": 650, "b": 9}
        assert session.month_top_videos("2024-02")[0]["title"] == "feb"
        assert session.funnel_periods()["months"] == ["2024-02", "2024-01"]
        assert session.funnel("monthly", "2024-02")[0]["value"] == 9
        assert len(session.trend(None, "monthly")) == 2
        assert session.available_months() == ["2024-01", "2024-02"]


class TestInsightSummary:
    def test_summary_fields(self, january_records: list[CanonicalRecord]) -> None:
        summary = build_insight_summary(january_records)
        assert summary["record_count"] == 4
        assert summary["period"] == {"start": "2024-01-02", "end": "2024-01-21"}
        assert summary["totals"]["views"] == 650
        assert summary["activation_total"] == 78
        assert summary["fourth_stage"]["framing"] == "revenue"
        assert summary["funnel_rates"]["acquisition_to_activation"] == "12.00"
        assert [row["title"] for row in summary["top_videos"]] == ["w1-b", "w3-a", "w1-a"]
        assert summary["peak_day"]["label"] == "2024-01-05"

    def test_empty_window(self, january_records: list[CanonicalRecord]) -> None:
        summary = build_insight_summary(january_records, DateRange.from_strings("2025-01-01", "2025-01-31"))
        assert summary["record_count"] == 0
        assert summary["period"] is None
        assert summary["peak_day"] is None
        assert summary["avg_interaction_rate"] == 0.0
