"""Record build cycles in the history database."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..build.orchestrator import CycleResult, CycleStatus
from ..db.models import OverrideAudit, Run
from ..db.session import session_scope


@dataclass
class RunContext:
    run_id: str
    project_path: str | None
    user_file: str | None
    created_at: datetime
    finished_at: datetime | None
    stage: str
    build_succeeded: bool | None
    error: str | None


def create_run(project_path: str | None = None, stage: str = "initialized") -> RunContext:
    with session_scope() as session:
        run = Run(project_path=project_path, stage=stage)
        session.add(run)
        session.flush()
        return _to_context(run)


def record_cycle(run_id: str, result: CycleResult, setting: str, value: str) -> RunContext:
    """Store the outcome of one cycle against ``run_id``."""
    with session_scope() as session:
        run = session.get(Run, run_id)
        if not run:
            raise ValueError(f"Run {run_id} not found")
        run.stage = _stage_for(result)
        run.finished_at = datetime.utcnow()
        run.build_succeeded = result.build_succeeded
        if result.project is not None:
            run.project_path = str(result.project.build_file)
        if result.user_file is not None:
            run.user_file = str(result.user_file)
        error = result.error or result.build_error
        if error is not None:
            run.error = str(error)
        if result.record is not None:
            session.add(
                OverrideAudit(
                    run_id=run.run_id,
                    setting=setting,
                    old_value=result.record.prior_text if result.record.existed_before else None,
                    new_value=value,
                    existed_before=result.record.existed_before,
                    restored=result.restored,
                )
            )
        session.flush()
        return _to_context(run)


def _stage_for(result: CycleResult) -> str:
    if result.status is CycleStatus.COMPLETED:
        if result.build_error is not None:
            return "failed"
        return "completed" if result.restored else "restore_failed"
    return result.status.value


def _to_context(run: Run) -> RunContext:
    return RunContext(
        run_id=run.run_id,
        project_path=run.project_path,
        user_file=run.user_file,
        created_at=run.created_at,
        finished_at=run.finished_at,
        stage=run.stage,
        build_succeeded=run.build_succeeded,
        error=run.error,
    )
