"""Select the project to build from a configured path."""

from __future__ import annotations

import logging
from pathlib import Path

from .collaborators import ProjectRef

PROJECT_GLOB = "*.*proj"

logger = logging.getLogger(__name__)


class PathProjectLocator:
    """Resolve a project file, or the single project file inside a directory."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else None

    def locate(self) -> ProjectRef | None:
        if self.path is None:
            return None
        if not self.path.is_dir():
            return ProjectRef(name=self.path.stem, build_file=self.path.resolve())
        candidates = sorted(p for p in self.path.glob(PROJECT_GLOB) if p.is_file())
        if len(candidates) != 1:
            logger.warning(
                "Expected one project file in %s, found %d", self.path, len(candidates)
            )
            return None
        build_file = candidates[0].resolve()
        return ProjectRef(name=build_file.stem, build_file=build_file)


__all__ = ["PathProjectLocator", "PROJECT_GLOB"]
