"""Host collaborators the build cycle depends on."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class ProjectRef:
    name: str
    build_file: Path

    def user_file(self, suffix: str = ".user") -> Path:
        return self.build_file.with_name(self.build_file.name + suffix)


class NoticeKind(str, Enum):
    FILE_MISSING = "file_missing"
    FILE_UNPARSABLE = "file_unparsable"
    NODE_MISSING = "node_missing"
    FILE_UNWRITABLE = "file_unwritable"


class ProjectLocator(Protocol):
    def locate(self) -> ProjectRef | None:
        """Return the selected project, or None when nothing is selected."""


class BuildInvoker(Protocol):
    def build(self, project: ProjectRef) -> bool:
        """Build ``project`` synchronously and report whether it succeeded."""


class UserNotifier(Protocol):
    def notify(self, kind: NoticeKind, path: Path) -> None:
        """Show a short error message about ``path``."""


__all__ = ["BuildInvoker", "NoticeKind", "ProjectLocator", "ProjectRef", "UserNotifier"]
