"""Application layer package."""

from .dashboard_service import DashboardSession, DashboardView, build_dashboard_view
from .insight_service import build_insight_summary
from .pipeline import PipelineResult, run_dashboard_pipeline

__all__ = [
    "DashboardSession",
    "DashboardView",
    "build_dashboard_view",
    "build_insight_summary",
    "PipelineResult",
    "run_dashboard_pipeline",
]
