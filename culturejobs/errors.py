from __future__ import annotations

from typing import Optional


class CultureJobsError(Exception):
    """Base error for everything raised by this package."""


class UpstreamFetchError(CultureJobsError):
    """The source site answered with a non-2xx status, timed out, or was unreachable."""

    def __init__(self, url: str, *, status: Optional[int] = None, cause: Optional[str] = None) -> None:
        self.url = url
        self.status = status
        self.cause = cause
        if status is not None:
            message = f"culture.be upstream returned {status} for {url}"
        else:
            message = f"culture.be request failed for {url}: {cause or 'unknown'}"
        super().__init__(message)

    @property
    def aborted(self) -> bool:
        return self.cause == "aborted"


class ValidationError(CultureJobsError):
    """A record failed schema validation at the serving boundary."""


class PersistenceError(CultureJobsError):
    """The store was unreachable or rejected a statement."""


__all__ = [
    "CultureJobsError",
    "UpstreamFetchError",
    "ValidationError",
    "PersistenceError",
]
