"""Video metrics dashboard entrypoint."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from video_metrics.application.pipeline import run_dashboard_pipeline
from video_metrics.domain.models import GRANULARITIES, DateRange


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Aggregate a short-video performance export")
    parser.add_argument("input", type=Path, help="Uploaded .xlsx/.xls/.csv export")
    parser.add_argument("--output", type=Path, default=None, help="Write the summary JSON here")
    parser.add_argument("--granularity", choices=GRANULARITIES, default="daily")
    parser.add_argument("--sheet", default=None, help="Preferred worksheet name")
    parser.add_argument("--current", type=DateRange.parse, default=None, help="YYYY-MM-DD:YYYY-MM-DD")
    parser.add_argument("--compare", type=DateRange.parse, default=None, help="YYYY-MM-DD:YYYY-MM-DD")
    return parser


def main(argv: list[str] | None = None) -> int:
    _configure_logging()
    args = build_parser().parse_args(argv)
    result = run_dashboard_pipeline(
        args.input,
        output_path=args.output,
        granularity=args.granularity,
        preferred_sheet=args.sheet,
        current_range=args.current,
        compare_range=args.compare,
    )

    print(
        "Summary prepared: "
        f"rows={result.raw_row_count}, "
        f"records={result.record_count}, "
        f"dropped={result.raw_row_count - result.record_count}"
    )
    stage_text = ", ".join([f"{name}={seconds:.3f}s" for name, seconds in result.stage_timings])
    print(f"Stage Timing: {stage_text}")
    if result.output_path is not None:
        print(f"Saved JSON: {result.output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
