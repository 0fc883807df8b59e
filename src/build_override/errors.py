"""Error types raised while applying or restoring an override."""

from __future__ import annotations

from pathlib import Path


class OverrideError(Exception):
    """Base class for override failures tied to a configuration file."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class NotFoundError(OverrideError):
    """The configuration file does not exist."""


class ParseError(OverrideError):
    """The configuration file is not well-formed XML."""


class SchemaError(OverrideError):
    """The file parsed but the namespaced Project root is missing."""


class StoreIOError(OverrideError, OSError):
    """The configuration file could not be read or written."""


class SessionStateError(RuntimeError):
    """An override session operation was called out of order."""


class BuildError(RuntimeError):
    """The build command could not be launched or did not finish."""


__all__ = [
    "OverrideError",
    "NotFoundError",
    "ParseError",
    "SchemaError",
    "StoreIOError",
    "SessionStateError",
    "BuildError",
]
