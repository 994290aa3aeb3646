"""End-to-end run: upload file -> canonical records -> dashboard summary JSON."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from time import perf_counter
from typing import Any

from video_metrics.application.dashboard_service import DashboardSession
from video_metrics.domain.models import DateRange, Granularity, normalize_granularity
from video_metrics.infrastructure.excel_repository import load_upload_records
from video_metrics.infrastructure.report_exporter import save_summary_json

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    summary: dict[str, Any]
    raw_row_count: int
    record_count: int
    output_path: Path | None = None
    stage_timings: list[tuple[str, float]] = field(default_factory=list)


def run_dashboard_pipeline(
    input_path: str | Path,
    output_path: str | Path | None = None,
    granularity: Granularity = "daily",
    preferred_sheet: str | None = None,
    current_range: DateRange | None = None,
    compare_range: DateRange | None = None,
) -> PipelineResult:
    mode = normalize_granularity(granularity)
    pipeline_start = perf_counter()
    stage_start = pipeline_start
    stage_timings: list[tuple[str, float]] = []

    def _mark(stage_name: str) -> None:
        nonlocal stage_start
        now = perf_counter()
        stage_timings.append((stage_name, now - stage_start))
        stage_start = now

    records, raw_row_count = load_upload_records(input_path, preferred_sheet=preferred_sheet)
    session = DashboardSession(records)
    _mark("load_records")

    defaults = session.default_ranges()
    view = session.view(current_range, compare_range, mode)
    _mark("build_view")

    periods = session.funnel_periods()
    summary: dict[str, Any] = {
        "source": str(input_path),
        "raw_row_count": raw_row_count,
        "record_count": session.record_count,
        "dropped_row_count": raw_row_count - session.record_count,
        "data_range": defaults["data"].to_dict() if defaults else None,
        "dashboard": view.to_dict() if view is not None else None,
        "overall_trend": session.trend(defaults["data"] if defaults else None, mode),
        "available_months": session.available_months(),
        "funnel_periods": periods,
        "funnel_all": session.funnel(),
        "insight": session.insight_summary(view.current_range if view is not None else None),
    }
    _mark("build_summary")

    saved_path: Path | None = None
    if output_path is not None:
        saved_path = Path(output_path)
        save_summary_json(saved_path, summary)
        _mark("save_json")

    logger.info(
        "Pipeline finished: rows=%d records=%d elapsed=%.3fs",
        raw_row_count,
        session.record_count,
        perf_counter() - pipeline_start,
    )
    return PipelineResult(
        summary=summary,
        raw_row_count=raw_row_count,
        record_count=session.record_count,
        output_path=saved_path,
        stage_timings=stage_timings,
    )
