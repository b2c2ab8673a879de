"""Engine and session factory for the job store.

The URL, pool sizing and echo flag come from ``culturejobs.config``. The
engine connects lazily, so importing this module never touches the database.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from culturejobs import config


def make_engine(url: Optional[str] = None) -> Engine:
    url = url or config.database_url()
    options: Dict[str, Any] = {"echo": config.db_echo(), "pool_pre_ping": True}
    # SQLite uses a single-connection pool; sizing only applies to server databases
    if not url.startswith("sqlite"):
        options["pool_size"] = config.db_pool_size()
        options["max_overflow"] = config.db_max_overflow()
    return create_engine(url, **options)


ENGINE: Engine = make_engine()
SessionLocal = sessionmaker(bind=ENGINE, autoflush=False, expire_on_commit=False)


@contextmanager
def get_session() -> Iterator[Session]:
    """Session bound to ENGINE, closed on exit. The crud helpers commit their own work."""
    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def current_engine_url() -> str:
    return ENGINE.url.render_as_string(hide_password=True)
