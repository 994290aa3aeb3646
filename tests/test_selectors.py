"""Top videos, data windows and peak day selection."""

from __future__ import annotations

from datetime import date

from video_metrics.application.reporting.selectors import (
    data_date_range,
    default_ranges,
    month_top_videos,
    peak_day,
    top_videos,
    unique_months,
)
from video_metrics.domain.models import CanonicalRecord, DateRange

from conftest import make_record


class TestTopVideos:
    def test_sorted_by_views(self, january_records: list[CanonicalRecord]) -> None:
        rows = top_videos(january_records, limit=2)
        assert [row["title"] for row in rows] == ["w1-b", "w3-a"]
        assert rows[0]["date"] == "2024-01-05"

    def test_range_scoped(self, january_records: list[CanonicalRecord]) -> None:
        rows = top_videos(january_records, DateRange.from_strings("2024-01-10", "2024-01-31"))
        assert [row["title"] for row in rows] == ["w3-a", "w3-b"]

    def test_ties_keep_upload_order(self) -> None:
        day = date(2024, 1, 1)
        records = [make_record(day, views=5, title=name) for name in ("first", "second", "third")]
        assert [row["title"] for row in top_videos(records)] == ["first", "second", "third"]

    def test_month_top_videos(self, january_records: list[CanonicalRecord]) -> None:
        extra = [*january_records, make_record(date(2024, 2, 1), views=9999, title="feb")]
        assert [row["title"] for row in month_top_videos(extra, "2024-01", limit=1)] == ["w1-b"]
        assert [row["title"] for row in month_top_videos(extra, "2024-02")] == ["feb"]


class TestWindows:
    def test_unique_months(self, january_records: list[CanonicalRecord]) -> None:
        assert unique_months(january_records) == ["2024-01"]

    def test_data_date_range(self, january_records: list[CanonicalRecord]) -> None:
        assert data_date_range(january_records) == DateRange(date(2024, 1, 2), date(2024, 1, 21))
        assert data_date_range([]) is None

    def test_default_ranges_split_at_median_record(self, january_records: list[CanonicalRecord]) -> None:
        ranges = default_ranges(january_records)
        assert ranges is not None
        assert ranges["data"] == DateRange(date(2024, 1, 2), date(2024, 1, 21))
        assert ranges["current"] == DateRange(date(2024, 1, 2), date(2024, 1, 16))
        assert ranges["compare"] == DateRange(date(2024, 1, 17), date(2024, 1, 21))

    def test_default_ranges_empty(self) -> None:
        assert default_ranges([]) is None


class TestPeakDay:
    def test_highest_daily_total(self) -> None:
        records = [
            make_record(date(2024, 1, 1), views=50),
            make_record(date(2024, 1, 2), views=30),
            make_record(date(2024, 1, 2), views=30),
        ]
        peak = peak_day(records)
        assert peak is not None
        assert peak["label"] == "2024-01-02"
        assert peak["views"] == 60

    def test_earliest_wins_ties(self) -> None:
        records = [make_record(date(2024, 1, 3), views=10), make_record(date(2024, 1, 1), views=10)]
        assert peak_day(records)["label"] == "2024-01-01"

    def test_no_records(self) -> None:
        assert peak_day([]) is None
