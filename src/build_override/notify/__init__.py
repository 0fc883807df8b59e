"""User notification."""

from .console import ConsoleNotifier
from .messages import MESSAGES, render

__all__ = ["ConsoleNotifier", "MESSAGES", "render"]
