"""Override session and project file store."""

from .session import OverrideRecord, OverrideSession, SessionState
from .store import MSBUILD_NAMESPACE, ConfigDocument, StructuredDocumentStore, check_setting

__all__ = [
    "ConfigDocument",
    "MSBUILD_NAMESPACE",
    "OverrideRecord",
    "OverrideSession",
    "SessionState",
    "StructuredDocumentStore",
    "check_setting",
]
