"""Upload ingestion: raw spreadsheet rows into canonical records and frames."""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import polars as pl

from video_metrics.dates import DateParseError, normalize_date
from video_metrics.domain.models import CanonicalRecord

logger = logging.getLogger(__name__)

_LEADING_FLOAT = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)")
_INT_CELL = re.compile(r"^[-+]?\d+$")
_FLOAT_CELL = re.compile(r"^[-+]?(?:\d+\.\d*|\.\d+|\d+(?:\.\d*)?[eE][-+]?\d+)$")

# Candidate column labels per canonical field, first present wins.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "publish_date": ("日期", "Date"),
    "lawyer_name": ("律师名称", "Lawyer Name"),
    "account_name": ("账号名称", "Account Name"),
    "video_type": ("视频类型", "Video Type"),
    "title": ("视频标题", "Video Title"),
    "views": ("视频播放量", "Views"),
    "likes": ("点赞量", "Likes"),
    "comments": ("评论量", "Comments"),
    "favorites": ("收藏量", "Favorites"),
    "shares": ("转发量", "Shares"),
    "net_fan_delta": ("粉丝净增量", "粉丝净增", "Net Fan Increase"),
    "cumulative_fans": ("累计粉丝量", "Total Fans"),
    "recommendations": ("推荐量", "Recommendations"),
    "fan_like_ratio_pct": ("粉赞比", "Fan/Like Ratio"),
    "completion_rate_pct": ("视频完播率", "Completion Rate"),
}
TEXT_FIELDS: tuple[str, ...] = ("lawyer_name", "account_name", "video_type", "title")
COUNT_FIELDS: tuple[str, ...] = (
    "views",
    "likes",
    "comments",
    "favorites",
    "shares",
    "net_fan_delta",
    "cumulative_fans",
    "recommendations",
)
PERCENT_FIELDS: tuple[str, ...] = ("fan_like_ratio_pct", "completion_rate_pct")

RECORD_SCHEMA: dict[str, Any] = {
    "publish_date": pl.Date,
    "date_label": pl.Utf8,
    "lawyer_name": pl.Utf8,
    "account_name": pl.Utf8,
    "video_type": pl.Utf8,
    "title": pl.Utf8,
    **{field: pl.Int64 for field in COUNT_FIELDS},
    "interactions": pl.Int64,
    "fan_like_ratio_pct": pl.Utf8,
    "completion_rate_pct": pl.Utf8,
    "fan_like_ratio": pl.Float64,
    "completion_rate": pl.Float64,
    "interaction_rate": pl.Float64,
}
EXCEL_SUFFIXES: tuple[str, ...] = (".xlsx", ".xlsm", ".xls")
CSV_SUFFIXES: tuple[str, ...] = (".csv",)


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return True


def resolve_field(row: Mapping[str, Any], field: str) -> Any:
    for key in FIELD_ALIASES[field]:
        if key in row and _is_present(row[key]):
            return row[key]
    return None


def to_number(value: Any) -> float | None:
    """Coerce a cell (number or ``"1,234"`` string) to float; ``None`` if not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_int(value: Any) -> int:
    number = to_number(value)
    if number is None:
        return 0
    return int(round(number))


def format_percent_cell(value: Any) -> str:
    """Numeric ratios are fractions of 1 (``0.5`` -> ``"50.00%"``); text passes through."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value * 100:.2f}%"
    if value is None:
        return "0%"
    return str(value)


def percent_value(text: Any) -> float:
    """Read the number out of a ``"12.50%"`` style cell; anything unreadable is 0."""
    match = _LEADING_FLOAT.match(str(text or "").replace("%", ""))
    if match is None:
        return 0.0
    return float(match.group(1))


def interaction_rate(views: int, likes: int, comments: int, shares: int) -> float:
    if views <= 0:
        return 0.0
    return (likes + comments + shares) / views * 100


def parse_row(row: Mapping[str, Any]) -> CanonicalRecord:
    """Map one raw row to a :class:`CanonicalRecord`; raises ``DateParseError`` on a bad date."""
    publish_date = normalize_date(resolve_field(row, "publish_date"))

    counts = {field: to_int(resolve_field(row, field)) for field in COUNT_FIELDS}
    texts = {}
    for field in TEXT_FIELDS:
        value = resolve_field(row, field)
        texts[field] = "" if value is None else str(value).strip()
    percents = {field: format_percent_cell(resolve_field(row, field)) for field in PERCENT_FIELDS}

    return CanonicalRecord(
        publish_date=publish_date,
        **texts,
        **counts,
        **percents,
        interaction_rate=interaction_rate(counts["views"], counts["likes"], counts["comments"], counts["shares"]),
    )


def parse_rows(rows: Iterable[Mapping[str, Any]]) -> list[CanonicalRecord]:
    """Parse an upload; rows without a resolvable date are dropped."""
    if rows is None:
        raise TypeError("rows must not be None")

    records: list[CanonicalRecord] = []
    dropped = 0
    for index, row in enumerate(rows):
        try:
            records.append(parse_row(row))
        except DateParseError as exc:
            dropped += 1
            logger.debug("Dropping row %d: %s", index, exc)
    if dropped:
        logger.info("Dropped %d row(s) with unresolvable dates; kept %d", dropped, len(records))
    return records


def _record_payload(record: CanonicalRecord) -> dict[str, Any]:
    payload = {
        "publish_date": record.publish_date,
        "date_label": record.date_label,
        "interactions": record.interactions,
        "fan_like_ratio": percent_value(record.fan_like_ratio_pct),
        "completion_rate": percent_value(record.completion_rate_pct),
        "interaction_rate": float(record.interaction_rate),
    }
    for field in (*TEXT_FIELDS, *COUNT_FIELDS, *PERCENT_FIELDS):
        payload[field] = getattr(record, field)
    return payload


def empty_record_frame() -> pl.DataFrame:
    return pl.DataFrame(schema=RECORD_SCHEMA)


def records_to_frame(records: Sequence[CanonicalRecord]) -> pl.DataFrame:
    if not records:
        return empty_record_frame()
    return pl.DataFrame([_record_payload(record) for record in records], schema=RECORD_SCHEMA)


def as_frame(records: pl.DataFrame | Sequence[CanonicalRecord]) -> pl.DataFrame:
    """Accept canonical records or an already-built record frame."""
    if records is None:
        raise TypeError("records must not be None")
    if isinstance(records, pl.DataFrame):
        return records
    return records_to_frame(list(records))


def frame_to_rows(frame: pl.DataFrame) -> list[dict[str, Any]]:
    """Plain-data record rows for rendering (dates as ``yyyy-MM-dd``)."""
    return frame.drop("publish_date").rename({"date_label": "date"}).to_dicts()


def _normalize_headers(raw_headers: Sequence[Any]) -> list[str]:
    headers: list[str] = []
    seen: dict[str, int] = {}
    for idx, value in enumerate(raw_headers):
        base = str(value).strip() if value not in (None, "") else f"column_{idx + 1}"
        count = seen.get(base, 0)
        name = base if count == 0 else f"{base}_{count + 1}"
        seen[base] = count + 1
        headers.append(name)
    return headers


def _import_openpyxl() -> Any:
    try:
        from openpyxl import load_workbook
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("openpyxl is required for Excel fallback I/O.") from exc
    return load_workbook


def _read_excel_polars(path: Path, preferred_sheet: str | None) -> pl.DataFrame:
    if preferred_sheet:
        try:
            return pl.read_excel(path, sheet_name=preferred_sheet, infer_schema_length=10000)
        except Exception:
            logger.debug("Sheet %r not readable in %s; using first sheet", preferred_sheet, path)
    return pl.read_excel(path, infer_schema_length=10000)


def _read_excel_openpyxl(path: Path, preferred_sheet: str | None) -> list[dict[str, Any]]:
    load_workbook = _import_openpyxl()
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        if not workbook.sheetnames:
            raise ValueError(f"No sheets found in {path}")
        sheet_name = preferred_sheet if preferred_sheet in workbook.sheetnames else workbook.sheetnames[0]
        row_iter = workbook[sheet_name].iter_rows(values_only=True)
        header_row = next(row_iter, None)
        if header_row is None:
            return []

        headers = _normalize_headers(header_row)
        rows: list[dict[str, Any]] = []
        for values in row_iter:
            if values is None or all(value is None for value in values):
                continue
            rows.append({name: values[idx] if idx < len(values) else None for idx, name in enumerate(headers)})
        return rows
    finally:
        workbook.close()


def restore_cell_number(value: Any) -> Any:
    """Turn a fully numeric text cell back into a number; other values pass through.

    A polars column holds a single dtype, so one text cell stringifies every
    numeric cell beside it.
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if _INT_CELL.match(text):
        return int(text)
    if _FLOAT_CELL.match(text):
        return float(text)
    return value


def _frame_to_raw_rows(frame: pl.DataFrame) -> list[dict[str, Any]]:
    string_columns = [name for name, dtype in frame.schema.items() if dtype == pl.Utf8]
    rows = frame.to_dicts()
    if not string_columns:
        return rows
    for row in rows:
        for name in string_columns:
            row[name] = restore_cell_number(row[name])
    return rows


def read_input_table(path: str | Path, preferred_sheet: str | None = None) -> list[dict[str, Any]]:
    """Read an uploaded ``.xlsx``/``.xls``/``.csv`` file into raw row mappings."""
    input_path = Path(path)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    suffix = input_path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        frame = pl.read_csv(input_path, infer_schema_length=10000, encoding="utf8-lossy")
        return _frame_to_raw_rows(frame)
    if suffix not in EXCEL_SUFFIXES:
        raise ValueError(f"Unsupported input format: {input_path.suffix or '(none)'}")

    try:
        return _frame_to_raw_rows(_read_excel_polars(input_path, preferred_sheet))
    except Exception as exc:
        logger.info("polars Excel reader failed for %s (%s); falling back to openpyxl", input_path, exc)
        return _read_excel_openpyxl(input_path, preferred_sheet)
