"""Apply one setting override to a project file and put it back afterwards."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..errors import OverrideError, SessionStateError
from .store import StructuredDocumentStore, check_setting

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    PREPARED = "prepared"
    RESTORED = "restored"


@dataclass(frozen=True)
class OverrideRecord:
    """State of the setting captured just before the override was written."""

    existed_before: bool
    prior_text: str = ""
    group_created: bool = False


class OverrideSession:
    """Prepare/restore protocol for a single setting in a single file.

    A session is used once: ``IDLE -> PREPARED -> RESTORED``. If ``prepare``
    raises, the session stays ``IDLE`` and nothing was written to disk.
    """

    def __init__(
        self,
        store: StructuredDocumentStore,
        path: Path | str,
        setting: str,
        value: str,
    ):
        check_setting(setting, value)
        self.store = store
        self.path = Path(path)
        self.setting = setting
        self.value = value
        self.state = SessionState.IDLE
        self._record: OverrideRecord | None = None

    def prepare(self) -> OverrideRecord:
        if self.state is not SessionState.IDLE:
            raise SessionStateError(f"Cannot prepare a session that is {self.state.value}")
        doc = self.store.load(self.path)
        group, group_created = self.store.get_or_create_property_group(doc)
        element, existed = self.store.get_or_create_setting(group, self.setting)
        record = OverrideRecord(
            existed_before=existed,
            prior_text=self.store.read_text(element) if existed else "",
            group_created=group_created,
        )
        self.store.write_text(element, self.value)
        self.store.save(doc)
        self._record = record
        self.state = SessionState.PREPARED
        logger.info(
            "Set %s=%s in %s (existed_before=%s)",
            self.setting,
            self.value,
            self.path,
            record.existed_before,
        )
        return record

    def restore(self) -> bool:
        """Put the captured value back; return False if restoration was abandoned."""
        if self.state is not SessionState.PREPARED or self._record is None:
            raise SessionStateError(f"Cannot restore a session that is {self.state.value}")
        record = self._record
        self._record = None
        self.state = SessionState.RESTORED
        try:
            self._restore(record)
        except OverrideError as exc:
            logger.warning("Restore of %s in %s abandoned: %s", self.setting, self.path, exc)
            return False
        logger.info("Restored %s in %s", self.setting, self.path)
        return True

    @property
    def record(self) -> OverrideRecord | None:
        return self._record

    def _restore(self, record: OverrideRecord) -> None:
        doc = self.store.load(self.path)
        if record.existed_before:
            group, _ = self.store.get_or_create_property_group(doc)
            element, _ = self.store.get_or_create_setting(group, self.setting)
            self.store.write_text(element, record.prior_text)
        else:
            element = self.store.find_setting(doc, self.setting)
            if element is None:
                logger.debug("%s already absent from %s", self.setting, self.path)
                return
            group = element.getparent()
            self.store.remove(element)
            if record.group_created and len(group) == 0 and not (group.text or "").strip():
                self.store.remove(group)
        self.store.save(doc)


__all__ = ["OverrideRecord", "OverrideSession", "SessionState"]
