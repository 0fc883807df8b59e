"""Reporting helpers."""

from .run_summary import build_run_summary, list_runs

__all__ = ["build_run_summary", "list_runs"]
