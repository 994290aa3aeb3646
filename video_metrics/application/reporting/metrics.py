"""Shared numeric/formatting utilities for reporting."""

from __future__ import annotations

from typing import Any

import polars as pl


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def safe_ratio(num: float, den: float) -> float | None:
    if den <= 0:
        return None
    return num / den


def safe_pct(num: float, den: float) -> float:
    """``num / den * 100`` with an empty denominator reading as 0."""
    ratio = safe_ratio(num, den)
    if ratio is None:
        return 0.0
    return ratio * 100


def safe_ratio_expr(num: pl.Expr, den: pl.Expr) -> pl.Expr:
    safe_den = pl.when(den > 0).then(den).otherwise(None)
    return num / safe_den


def safe_mean_expr(total: pl.Expr, count: pl.Expr) -> pl.Expr:
    return safe_ratio_expr(total, count).round(2).fill_null(0.0)


def fmt_rate(num: float, den: float) -> str:
    """Two-decimal percentage string, ``"0"`` when the denominator is empty."""
    if den <= 0:
        return "0"
    return f"{num / den * 100:.2f}"


def delta_pct(curr: float, prev: float) -> float:
    if not prev:
        return 0.0
    return round((curr - prev) / prev * 100, 1)
