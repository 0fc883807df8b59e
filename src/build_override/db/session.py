"""Session utilities for the SQLite history database."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker


def _build_engine(db_path: Path):
    url = f"sqlite:///{db_path}"
    return create_engine(url)


DB_PATH = Path("build_override.db")
_engine = None
_Session = None


def configure_engine(path: str | Path) -> None:
    """Point the history database at ``path`` (config and tests)."""
    global DB_PATH, _engine, _Session
    if _engine is not None:
        _engine.dispose()
    DB_PATH = Path(path)
    _engine = _build_engine(DB_PATH)
    _Session = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)


def get_engine():
    if _engine is None:
        configure_engine(DB_PATH)
    return _engine


def get_session() -> Session:
    get_engine()
    return _Session()


@contextmanager
def session_scope() -> Iterator[Session]:
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(base) -> None:
    from . import models  # noqa: F401  # Ensure models are registered

    base.metadata.create_all(get_engine())
