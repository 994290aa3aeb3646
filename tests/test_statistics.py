"""Correlation, KPI totals and fan-health ratios."""

from __future__ import annotations

import pytest

from video_metrics.application.reporting.statistics import (
    CORRELATION_METRICS,
    average_fan_health,
    average_interaction_rate,
    correlation_matrix,
    fan_health_rate,
    fan_health_rows,
    pearson,
    sum_kpis,
)
from video_metrics.domain.models import CanonicalRecord


class TestPearson:
    def test_perfect_positive_and_negative(self) -> None:
        assert pearson([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
        assert pearson([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)

    def test_symmetric(self) -> None:
        xs = [3.0, 1.0, 4.0, 1.0, 5.0]
        ys = [9.0, 2.0, 6.0, 5.0, 3.0]
        assert pearson(xs, ys) == pytest.approx(pearson(ys, xs))

    def test_bounded(self) -> None:
        value = pearson([0.1, 0.2, 0.30000000000000004], [1e9, 2e9, 3e9])
        assert -1.0 <= value <= 1.0

    def test_constant_series_is_zero(self) -> None:
        assert pearson([5, 5, 5], [1, 2, 3]) == 0.0

    def test_empty_is_zero(self) -> None:
        assert pearson([], []) == 0.0

    def test_uses_common_prefix(self) -> None:
        assert pearson([1, 2, 3, 100], [1, 2, 3]) == pytest.approx(1.0)


class TestCorrelationMatrix:
    def test_full_grid_with_unit_diagonal(self) -> None:
        buckets = [
            {"views": 10, "interactions": 2, "likes": 1, "net_fan_delta": 0, "completion_rate": 10.0, "interaction_rate": 20.0},
            {"views": 20, "interactions": 3, "likes": 3, "net_fan_delta": 1, "completion_rate": 12.0, "interaction_rate": 15.0},
            {"views": 40, "interactions": 9, "likes": 4, "net_fan_delta": 5, "completion_rate": 11.0, "interaction_rate": 22.5},
        ]
        cells = correlation_matrix(buckets)
        assert len(cells) == len(CORRELATION_METRICS) ** 2
        assert (cells[0]["x"], cells[0]["y"]) == ("views", "views")
        assert (cells[1]["x"], cells[1]["y"]) == ("views", "interactions")
        for cell in cells:
            if cell["x"] == cell["y"]:
                assert cell["value"] == pytest.approx(1.0)

    def test_no_buckets(self) -> None:
        assert all(cell["value"] == 0.0 for cell in correlation_matrix([]))


class TestKpisAndFanHealth:
    def test_sum_kpis(self, january_records: list[CanonicalRecord]) -> None:
        totals = sum_kpis(january_records)
        assert totals["views"] == 650
        assert totals["likes"] == 65
        assert totals["comments"] == 13
        assert totals["shares"] == 19
        assert totals["recommendations"] == 0

    def test_sum_kpis_empty(self) -> None:
        assert set(sum_kpis([]).values()) == {0}

    def test_fan_health_rate(self) -> None:
        assert fan_health_rate(30, 520) == pytest.approx(5.77)
        assert fan_health_rate(10, 0) == 0.0

    def test_rows_include_comparison_rate_when_paired(self) -> None:
        rows = fan_health_rows(
            [{"likes": 10, "cumulative_fans": 200, "compare_likes": 5, "compare_cumulative_fans": 0}]
        )
        assert rows[0]["health_rate"] == 5.0
        assert rows[0]["compare_health_rate"] == 0.0

    def test_unpaired_rows_have_no_comparison_rate(self) -> None:
        assert "compare_health_rate" not in fan_health_rows([{"likes": 1, "cumulative_fans": 10}])[0]

    def test_averages(self) -> None:
        buckets = [
            {"likes": 10, "cumulative_fans": 100, "interaction_rate": 10.0},
            {"likes": 30, "cumulative_fans": 100, "interaction_rate": 20.0},
        ]
        assert average_fan_health(buckets) == 20.0
        assert average_interaction_rate(buckets) == 15.0
        assert average_interaction_rate([]) == 0.0
