"""Build cycle orchestration and host collaborators."""

from .collaborators import BuildInvoker, NoticeKind, ProjectLocator, ProjectRef, UserNotifier
from .invoker import CommandBuildInvoker
from .locator import PathProjectLocator
from .orchestrator import BuildOrchestrator, CycleResult, CycleStatus

__all__ = [
    "BuildInvoker",
    "BuildOrchestrator",
    "CommandBuildInvoker",
    "CycleResult",
    "CycleStatus",
    "NoticeKind",
    "PathProjectLocator",
    "ProjectLocator",
    "ProjectRef",
    "UserNotifier",
]
