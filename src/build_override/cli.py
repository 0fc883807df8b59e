"""Typer CLI for build-override."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape

from .build import BuildOrchestrator, CommandBuildInvoker, CycleStatus, PathProjectLocator
from .build.orchestrator import CycleResult, notice_for
from .config import ConfigBundle, load_config_bundle
from .db import Base, configure_engine, init_db
from .errors import OverrideError
from .notify import ConsoleNotifier
from .overrides import StructuredDocumentStore
from .reports import build_run_summary, list_runs
from .runs import RunContext, create_run, record_cycle

app = typer.Typer(help="Build a project with one MSBuild setting temporarily overridden")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _load_config(config_path: Optional[Path]) -> ConfigBundle:
    try:
        return load_config_bundle(config_path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid configuration: {exc}", param_hint="--config") from exc


def _init_history(config: ConfigBundle) -> bool:
    if not config.history.enabled:
        return False
    configure_engine(config.history.db_path)
    init_db(Base)
    return True


def _build_orchestrator(config: ConfigBundle, project_path: Optional[str]) -> BuildOrchestrator:
    return BuildOrchestrator(
        locator=PathProjectLocator(project_path),
        invoker=CommandBuildInvoker(
            config.build.command,
            configuration=config.build.configuration,
            timeout=config.build.timeout,
        ),
        notifier=ConsoleNotifier(config.notify.locale),
        store=StructuredDocumentStore(config.override.namespace),
        setting=config.override.setting,
        value=config.override.value,
        user_file_suffix=config.override.user_file_suffix,
    )


def _report(result: CycleResult, setting: str) -> int:
    if result.status is CycleStatus.NO_PROJECT:
        rprint("[yellow]No project selected[/yellow]")
        return 0
    if result.status is CycleStatus.ABORTED:
        return 1
    if not result.restored:
        rprint(f"[yellow]{setting} could not be restored in {escape(str(result.user_file))}[/yellow]")
    if result.build_error is not None:
        rprint(f"[red]{escape(str(result.build_error))}[/red]")
        return 1
    if result.build_succeeded:
        rprint(f"[green]Build of {escape(result.project.name)} succeeded[/green]")
        return 0
    rprint(f"[red]Build of {escape(result.project.name)} failed[/red]")
    return 1


@app.command()
def run(
    project: Optional[str] = typer.Argument(None, help="Project file or directory (defaults to project.path)"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to build_override.yml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Build the selected project with the override setting forced on."""
    _setup_logging(verbose)
    config = _load_config(config_path)
    project_path = project or config.project.path
    orchestrator = _build_orchestrator(config, project_path)
    run_ctx: RunContext | None = None
    if _init_history(config):
        run_ctx = create_run(project_path)
    result = orchestrator.run()
    if run_ctx:
        record_cycle(run_ctx.run_id, result, config.override.setting, config.override.value)
    raise typer.Exit(code=_report(result, config.override.setting))


@app.command()
def status(
    project: Optional[str] = typer.Argument(None, help="Project file or directory (defaults to project.path)"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to build_override.yml"),
) -> None:
    """Show the current value of the override setting in the .user file."""
    config = _load_config(config_path)
    ref = PathProjectLocator(project or config.project.path).locate()
    if ref is None:
        rprint("[yellow]No project selected[/yellow]")
        return
    setting = config.override.setting
    user_file = ref.user_file(config.override.user_file_suffix)
    store = StructuredDocumentStore(config.override.namespace)
    try:
        element = store.find_setting(store.load(user_file), setting)
    except OverrideError as exc:
        ConsoleNotifier(config.notify.locale).notify(notice_for(exc), user_file)
        raise typer.Exit(code=1) from exc
    if element is None:
        rprint(f"{setting} is not set in {escape(user_file.name)}")
    else:
        rprint(f"{setting}='{escape(store.read_text(element))}' in {escape(user_file.name)}")


@app.command()
def history(
    limit: int = typer.Option(20, help="Number of runs to show"),
    run_id: Optional[str] = typer.Option(None, "--run-id", help="Show one run with its override audit"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to build_override.yml"),
) -> None:
    """List recent build cycles, or the full record of one."""
    config = _load_config(config_path)
    if not _init_history(config):
        rprint("[yellow]History is disabled[/yellow]")
        return
    if run_id:
        try:
            summary = build_run_summary(run_id)
        except ValueError as exc:
            rprint(f"[red]{escape(str(exc))}[/red]")
            raise typer.Exit(code=1) from exc
        rprint(summary)
        return
    for summary in list_runs(limit):
        outcome = {True: "ok", False: "failed", None: "-"}[summary["build_succeeded"]]
        rprint(
            f"{summary['created_at']} {summary['run_id']} {summary['stage']:<14} "
            f"build={outcome} {escape(summary['project_path'] or '-')}"
        )


@app.command()
def initdb(
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to build_override.yml"),
) -> None:
    """Create the history database schema."""
    config = _load_config(config_path)
    configure_engine(config.history.db_path)
    init_db(Base)
    rprint(f"[green]Database initialized at {escape(config.history.db_path)}[/green]")


if __name__ == "__main__":
    app()
