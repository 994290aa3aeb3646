"""Domain models for short-video performance records."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime, time
from typing import Any, Literal, get_args

Granularity = Literal["daily", "weekly", "monthly", "quarterly"]
GRANULARITIES: tuple[str, ...] = get_args(Granularity)

DATE_LABEL_FORMAT = "%Y-%m-%d"
END_OF_DAY = time(23, 59, 59, 999000)


def normalize_granularity(value: Any) -> str:
    mode = str(value or "").strip().lower()
    if mode not in GRANULARITIES:
        raise ValueError(f"Unknown granularity: {value!r} (expected one of {', '.join(GRANULARITIES)})")
    return mode


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar window; ``end`` reaches through the last instant of its day."""

    start: date
    end: date

    @classmethod
    def from_strings(cls, start: str, end: str) -> "DateRange":
        return cls(
            start=datetime.strptime(start.strip(), DATE_LABEL_FORMAT).date(),
            end=datetime.strptime(end.strip(), DATE_LABEL_FORMAT).date(),
        )

    @classmethod
    def parse(cls, text: str) -> "DateRange":
        """Parse ``YYYY-MM-DD:YYYY-MM-DD``."""
        start, sep, end = str(text).partition(":")
        if not sep:
            raise ValueError(f"Date range must look like YYYY-MM-DD:YYYY-MM-DD, got {text!r}")
        return cls.from_strings(start, end)

    @property
    def start_instant(self) -> datetime:
        return datetime.combine(self.start, time.min)

    @property
    def end_instant(self) -> datetime:
        return datetime.combine(self.end, END_OF_DAY)

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.strftime(DATE_LABEL_FORMAT), "end": self.end.strftime(DATE_LABEL_FORMAT)}


@dataclass(frozen=True)
class CanonicalRecord:
    """One normalized upload row."""

    publish_date: date
    lawyer_name: str = ""
    account_name: str = ""
    video_type: str = ""
    title: str = ""
    views: int = 0
    likes: int = 0
    comments: int = 0
    favorites: int = 0
    shares: int = 0
    net_fan_delta: int = 0
    cumulative_fans: int = 0
    recommendations: int = 0
    fan_like_ratio_pct: str = "0%"
    completion_rate_pct: str = "0%"
    interaction_rate: float = 0.0

    @property
    def date_label(self) -> str:
        return self.publish_date.strftime(DATE_LABEL_FORMAT)

    @property
    def interactions(self) -> int:
        return self.likes + self.comments + self.shares

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["publish_date"] = self.date_label
        payload["interactions"] = self.interactions
        return payload
