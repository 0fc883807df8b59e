"""Summaries of recorded build cycles."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import desc

from ..db.models import OverrideAudit, Run
from ..db.session import session_scope


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if isinstance(value, datetime) else None


def build_run_summary(run_id: str) -> dict:
    with session_scope() as session:
        run = session.get(Run, run_id)
        if not run:
            raise ValueError(f"Run {run_id} not found")
        return _summarize(run)


def list_runs(limit: int = 20) -> list[dict]:
    """Return the most recent runs, newest first."""
    with session_scope() as session:
        runs = session.query(Run).order_by(desc(Run.created_at)).limit(limit).all()
        return [_summarize(run) for run in runs]


def _summarize(run: Run) -> dict:
    overrides = sorted(run.overrides, key=lambda audit: audit.id)
    return {
        "run_id": run.run_id,
        "project_path": run.project_path,
        "user_file": run.user_file,
        "stage": run.stage,
        "build_succeeded": run.build_succeeded,
        "error": run.error,
        "created_at": _iso(run.created_at),
        "finished_at": _iso(run.finished_at),
        "overrides": [_summarize_override(audit) for audit in overrides],
    }


def _summarize_override(audit: OverrideAudit) -> dict:
    return {
        "setting": audit.setting,
        "old_value": audit.old_value,
        "new_value": audit.new_value,
        "existed_before": audit.existed_before,
        "restored": audit.restored,
    }
