"""Shared fixtures: small canonical record sets and raw upload rows."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from video_metrics.domain.models import CanonicalRecord


def make_record(day: date, **overrides: Any) -> CanonicalRecord:
    views = overrides.get("views", 0)
    engaged = overrides.get("likes", 0) + overrides.get("comments", 0) + overrides.get("shares", 0)
    overrides.setdefault("interaction_rate", engaged / views * 100 if views > 0 else 0.0)
    return CanonicalRecord(publish_date=day, **overrides)


@pytest.fixture()
def same_day_records() -> list[CanonicalRecord]:
    day = date(2024, 1, 1)
    return [
        make_record(day, views=10, cumulative_fans=100, completion_rate_pct="50.00%", title="a"),
        make_record(day, views=20, cumulative_fans=150, completion_rate_pct="25.00%", title="b"),
        make_record(day, views=30, cumulative_fans=120, completion_rate_pct="0%", title="c"),
    ]


@pytest.fixture()
def january_records() -> list[CanonicalRecord]:
    """Two weeks of activity with a silent week in between (2024-01-01 is a Monday)."""
    return [
        make_record(date(2024, 1, 2), views=100, likes=10, comments=2, shares=3, cumulative_fans=500, title="w1-a"),
        make_record(date(2024, 1, 5), views=300, likes=30, comments=6, shares=9, cumulative_fans=520, title="w1-b"),
        make_record(date(2024, 1, 16), views=200, likes=20, comments=4, shares=6, cumulative_fans=560, title="w3-a"),
        make_record(date(2024, 1, 21), views=50, likes=5, comments=1, shares=1, cumulative_fans=570, title="w3-b"),
    ]


@pytest.fixture()
def raw_rows() -> list[dict[str, Any]]:
    return [
        {
            "日期": "2024/1/1",
            "律师名称": "张律师",
            "账号名称": "法律小课堂",
            "视频类型": "科普",
            "视频标题": "合同纠纷怎么办",
            "视频播放量": 100,
            "点赞量": 10,
            "评论量": 5,
            "收藏量": 3,
            "转发量": 5,
            "粉丝净增量": 4,
            "累计粉丝量": 1000,
            "粉赞比": 0.1,
            "视频完播率": 0.5,
        },
        {
            "Date": 45292,
            "Lawyer Name": "Li",
            "Account Name": "Law Daily",
            "Video Type": "case",
            "Video Title": "Tenant rights",
            "Views": "200",
            "Likes": 20,
            "Comments": 0,
            "Shares": 0,
            "Net Fan Increase": 6,
            "Total Fans": 1010,
            "Completion Rate": "30%",
        },
        {"日期": "not-a-date", "视频播放量": 999},
        {"视频播放量": 5},
    ]
