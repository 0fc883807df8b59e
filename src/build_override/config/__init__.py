"""Configuration loading."""

from .loader import ConfigBundle, load_config_bundle

__all__ = ["ConfigBundle", "load_config_bundle"]
