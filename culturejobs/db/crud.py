from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from sqlalchemy import func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from culturejobs.db.models import Job, JobSyncState
from culturejobs.errors import PersistenceError

LOGGER = logging.getLogger(__name__)

DEFAULT_SOURCE = "CULTURE_BE"


@contextmanager
def _guard(session: Session, action: str) -> Iterator[None]:
    """Roll back and re-raise store failures as PersistenceError."""
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        LOGGER.error("persistence action=%s error=%s", action, exc)
        raise PersistenceError(f"{action} failed: {exc.__class__.__name__}") from exc


def list_jobs(session: Session, source: str = DEFAULT_SOURCE) -> Sequence[Job]:
    """All jobs of a source, newest publication first, then highest uid."""
    with _guard(session, "list_jobs"):
        stmt = (
            select(Job)
            .where(Job.source == source)
            .order_by(Job.publication_date.desc(), Job.uid.desc())
        )
        return session.execute(stmt).scalars().all()


def get_job_by_uid(session: Session, uid: int, source: str = DEFAULT_SOURCE) -> Optional[Job]:
    with _guard(session, "get_job_by_uid"):
        stmt = select(Job).where(Job.source == source, Job.uid == uid).limit(1)
        return session.execute(stmt).scalars().first()


def persisted_uids(session: Session, source: str = DEFAULT_SOURCE) -> set[int]:
    with _guard(session, "persisted_uids"):
        rows = session.execute(select(Job.uid).where(Job.source == source)).scalars().all()
        return set(rows)


def _count_uids(session: Session, source: str, uids: Iterable[int]) -> int:
    stmt = select(func.count()).select_from(Job).where(Job.source == source, Job.uid.in_(list(uids)))
    return int(session.execute(stmt).scalar_one())


def _insert_ignoring_duplicates(session: Session, source: str, rows: list[dict[str, Any]]):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert as pg_insert

        return pg_insert(Job).on_conflict_do_nothing(index_elements=["source", "uid"]), rows
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert as sqlite_insert

        return sqlite_insert(Job).on_conflict_do_nothing(index_elements=["source", "uid"]), rows

    # Other backends: filter against what is already stored
    present = set(
        session.execute(
            select(Job.uid).where(Job.source == source, Job.uid.in_([r["uid"] for r in rows]))
        ).scalars()
    )
    return insert(Job), [r for r in rows if r["uid"] not in present]


def insert_jobs(
    session: Session,
    rows: Sequence[Mapping[str, Any]],
    source: str = DEFAULT_SOURCE,
) -> int:
    """Insert job rows in one batch, skipping any (source, uid) already stored.

    Returns how many rows were actually inserted.
    """
    if not rows:
        return 0

    payload = [dict(row, source=source) for row in rows]
    uids = [row["uid"] for row in payload]

    with _guard(session, "insert_jobs"):
        before = _count_uids(session, source, uids)
        stmt, params = _insert_ignoring_duplicates(session, source, payload)
        if params:
            session.execute(stmt, params)
        session.commit()
        after = _count_uids(session, source, uids)
    return after - before


def delete_jobs_by_uid(session: Session, uids: Iterable[int], source: str = DEFAULT_SOURCE) -> int:
    targets = list(uids)
    if not targets:
        return 0
    with _guard(session, "delete_jobs_by_uid"):
        deleted = (
            session.query(Job)
            .filter(Job.source == source, Job.uid.in_(targets))
            .delete(synchronize_session=False)
        )
        session.commit()
    return int(deleted or 0)


def upsert_sync_state(session: Session, synced_at: datetime, source: str = DEFAULT_SOURCE) -> JobSyncState:
    with _guard(session, "upsert_sync_state"):
        state = session.get(JobSyncState, source)
        if state is None:
            state = JobSyncState(source=source, last_synced_at=synced_at)
            session.add(state)
        else:
            state.last_synced_at = synced_at
        session.commit()
        session.refresh(state)
    return state


def get_last_synced_at(session: Session, source: str = DEFAULT_SOURCE) -> Optional[datetime]:
    with _guard(session, "get_last_synced_at"):
        state = session.get(JobSyncState, source)
        return state.last_synced_at if state else None
