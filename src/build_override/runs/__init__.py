"""Run history helpers."""

from .context import RunContext, create_run, record_cycle

__all__ = ["RunContext", "create_run", "record_cycle"]
