"""Localized user-facing messages."""

from __future__ import annotations

from ..build.collaborators import NoticeKind

DEFAULT_LOCALE = "en"

TITLES = {
    "en": "Error",
    "ja": "エラー",
}

MESSAGES: dict[str, dict[NoticeKind, str]] = {
    "en": {
        NoticeKind.FILE_MISSING: ".user file not found: {name}",
        NoticeKind.FILE_UNPARSABLE: "Cannot read {name}.",
        NoticeKind.NODE_MISSING: "Project node not found. {name}",
        NoticeKind.FILE_UNWRITABLE: "Cannot write {name}.",
    },
    "ja": {
        NoticeKind.FILE_MISSING: ".userファイルが見つかりません。{name}",
        NoticeKind.FILE_UNPARSABLE: "{name}ファイルを読み込めません。",
        NoticeKind.NODE_MISSING: "Projectノードが見つかりません。{name}",
        NoticeKind.FILE_UNWRITABLE: "{name}ファイルに書き込めません。",
    },
}


def render(kind: NoticeKind, name: str, locale: str = DEFAULT_LOCALE) -> tuple[str, str]:
    """Return ``(title, message)`` for ``kind``, falling back to English."""
    if locale not in MESSAGES:
        locale = DEFAULT_LOCALE
    return TITLES[locale], MESSAGES[locale][kind].format(name=name)
