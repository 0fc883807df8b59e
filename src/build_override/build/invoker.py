"""Run the project build as an external command."""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from ..errors import BuildError
from .collaborators import ProjectRef

DEFAULT_COMMAND = ("msbuild", "{project}", "/t:Build", "/p:Configuration={configuration}")
PLACEHOLDERS = ("project", "name", "configuration")

logger = logging.getLogger(__name__)


def validate_command(command: Sequence[str]) -> list[str]:
    """Return ``command`` as a list, raising ValueError for an unusable template."""
    if not command:
        raise ValueError("Build command must not be empty")
    sample = {key: key for key in PLACEHOLDERS}
    for part in command:
        try:
            part.format(**sample)
        except KeyError as exc:
            raise ValueError(
                f"Unknown placeholder {exc} in build command; use {', '.join(PLACEHOLDERS)}"
            ) from exc
        except (AttributeError, IndexError, ValueError) as exc:
            raise ValueError(f"Invalid build command part {part!r}: {exc}") from exc
    return list(command)


class CommandBuildInvoker:
    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        configuration: str = "Debug",
        timeout: int | None = None,
    ):
        self.command = validate_command(command)
        self.configuration = configuration
        self.timeout = timeout

    def command_for(self, project: ProjectRef) -> list[str]:
        values = {
            "project": str(project.build_file),
            "name": project.name,
            "configuration": self.configuration,
        }
        return [part.format(**values) for part in self.command]

    def build(self, project: ProjectRef) -> bool:
        args = self.command_for(project)
        logger.debug("Running %s", args)
        try:
            completed = subprocess.run(args, cwd=project.build_file.parent, timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            raise BuildError(f"Build of {project.name} timed out after {self.timeout}s") from exc
        except OSError as exc:
            raise BuildError(f"Cannot run {args[0]}: {exc}") from exc
        if completed.returncode != 0:
            logger.info("Build of %s exited with %d", project.name, completed.returncode)
        return completed.returncode == 0


__all__ = ["CommandBuildInvoker", "DEFAULT_COMMAND", "PLACEHOLDERS", "validate_command"]
