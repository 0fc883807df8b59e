"""Run a build with the override applied, restoring it on every exit path."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..errors import BuildError, NotFoundError, OverrideError, SchemaError, StoreIOError
from ..overrides import OverrideRecord, OverrideSession, StructuredDocumentStore, check_setting
from .collaborators import BuildInvoker, NoticeKind, ProjectLocator, ProjectRef, UserNotifier

logger = logging.getLogger(__name__)


class CycleStatus(str, Enum):
    NO_PROJECT = "no_project"
    ABORTED = "aborted"
    COMPLETED = "completed"


@dataclass
class CycleResult:
    status: CycleStatus
    project: ProjectRef | None = None
    user_file: Path | None = None
    record: OverrideRecord | None = None
    build_succeeded: bool | None = None
    restored: bool | None = None
    error: OverrideError | None = None
    build_error: BuildError | None = None


def notice_for(error: OverrideError) -> NoticeKind:
    if isinstance(error, NotFoundError):
        return NoticeKind.FILE_MISSING
    if isinstance(error, SchemaError):
        return NoticeKind.NODE_MISSING
    if isinstance(error, StoreIOError):
        return NoticeKind.FILE_UNWRITABLE
    return NoticeKind.FILE_UNPARSABLE


class BuildOrchestrator:
    def __init__(
        self,
        locator: ProjectLocator,
        invoker: BuildInvoker,
        notifier: UserNotifier,
        store: StructuredDocumentStore | None = None,
        setting: str = "MvcBuildViews",
        value: str = "true",
        user_file_suffix: str = ".user",
    ):
        check_setting(setting, value)
        self.locator = locator
        self.invoker = invoker
        self.notifier = notifier
        self.store = store or StructuredDocumentStore()
        self.setting = setting
        self.value = value
        self.user_file_suffix = user_file_suffix

    def run(self) -> CycleResult:
        project = self.locator.locate()
        if project is None:
            logger.info("No project selected; nothing to build")
            return CycleResult(status=CycleStatus.NO_PROJECT)

        user_file = project.user_file(self.user_file_suffix)
        session = OverrideSession(self.store, user_file, self.setting, self.value)
        try:
            record = session.prepare()
        except OverrideError as exc:
            logger.warning("Override not applied to %s: %s", user_file, exc)
            self.notifier.notify(notice_for(exc), user_file)
            return CycleResult(
                status=CycleStatus.ABORTED,
                project=project,
                user_file=user_file,
                error=exc,
            )

        result = CycleResult(
            status=CycleStatus.COMPLETED,
            project=project,
            user_file=user_file,
            record=record,
        )
        try:
            logger.info("Building %s", project.name)
            result.build_succeeded = self.invoker.build(project)
        except BuildError as exc:
            logger.warning("Build of %s could not run: %s", project.name, exc)
            result.build_succeeded = False
            result.build_error = exc
        finally:
            result.restored = session.restore()
        return result


__all__ = ["BuildOrchestrator", "CycleResult", "CycleStatus", "notice_for"]
