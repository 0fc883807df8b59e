"""ORM models for the build cycle history."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Run(Base):
    __tablename__ = "runs"

    run_id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_path: Mapped[str | None] = mapped_column(String)
    user_file: Mapped[str | None] = mapped_column(String)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime)
    stage: Mapped[str] = mapped_column(String, default="initialized")
    build_succeeded: Mapped[bool | None] = mapped_column(Boolean)
    error: Mapped[str | None] = mapped_column(String)

    overrides: Mapped[list["OverrideAudit"]] = relationship(back_populates="run")


class OverrideAudit(Base):
    __tablename__ = "override_audit"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[str] = mapped_column(ForeignKey("runs.run_id"), nullable=False)
    setting: Mapped[str] = mapped_column(String, nullable=False)
    old_value: Mapped[str | None]
    new_value: Mapped[str | None]
    existed_before: Mapped[bool] = mapped_column(Boolean, default=False)
    restored: Mapped[bool | None] = mapped_column(Boolean)
    applied_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    run: Mapped[Run] = relationship(back_populates="overrides")
