from __future__ import annotations

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from culturejobs.cache import ResponseCache
from culturejobs.db.session import get_session
from culturejobs.providers.culture_be import CultureBeProvider


def db_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a SQLAlchemy :class:`Session`.

    Usage in route handlers:
        def handler(session: Session = Depends(db_session)):
            ...
    """
    with get_session() as session:
        yield session


def response_cache(request: Request) -> ResponseCache:
    """The process-wide cache created by the app lifespan."""
    return request.app.state.cache


def culture_be_provider() -> CultureBeProvider:
    return CultureBeProvider()


__all__ = ["db_session", "response_cache", "culture_be_provider"]
