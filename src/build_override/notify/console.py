"""Print notices to the terminal with rich."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..build.collaborators import NoticeKind
from .messages import DEFAULT_LOCALE, render


class ConsoleNotifier:
    def __init__(self, locale: str = DEFAULT_LOCALE, console: Console | None = None):
        self.locale = locale
        self.console = console or Console(stderr=True)
        self.notices: list[tuple[NoticeKind, Path]] = []

    def notify(self, kind: NoticeKind, path: Path) -> None:
        self.notices.append((kind, path))
        title, message = render(kind, Path(path).name, self.locale)
        self.console.print(f"[bold red]{escape(title)}[/bold red]: [yellow]{escape(message)}[/yellow]")
