"""Build Override: force an MSBuild setting for the duration of one build."""

from importlib.metadata import version as _version

__all__ = ["get_version"]


def get_version() -> str:
    """Return the installed package version."""
    try:
        return _version("build-override")
    except Exception:  # pragma: no cover - fallback for editable installs
        return "0.0.0"
