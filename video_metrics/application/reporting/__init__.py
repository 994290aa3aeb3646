"""Aggregation, comparison and statistics helpers for the dashboard."""
