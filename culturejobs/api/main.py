from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Path
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from culturejobs import config
from culturejobs.api.deps import culture_be_provider, db_session, response_cache
from culturejobs.api.schemas import JobOut, JobsResponse, SyncResponse, job_to_out
from culturejobs.cache import ResponseCache
from culturejobs.core.steplog import LoggingStepLogger
from culturejobs.db import crud
from culturejobs.errors import CultureJobsError, ValidationError
from culturejobs.providers.culture_be import CultureBeProvider, sync_new_jobs

LOGGER = logging.getLogger(__name__)
JOBS_CACHE_KEY = "jobs:culture_be:list"


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.cache.connect()
    LOGGER.info("cache state=%s", app.state.cache.state)
    yield
    app.state.cache.close()


# -------------------------
# FastAPI setup
# -------------------------
app = FastAPI(title="Culture Jobs API", version="0.1.0", lifespan=lifespan)
app.state.cache = ResponseCache(config.redis_url())

# CORS (open for now; tighten before public deploy)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _steps() -> LoggingStepLogger:
    return LoggingStepLogger(logging.getLogger("culturejobs.api.steps"))


# -------------------------
# Routes
# -------------------------
@app.get("/", tags=["meta"])
async def root():
    return {"message": "Culture Jobs API is running"}


@app.get("/healthz", tags=["meta"])
async def healthz():
    return {"status": "ok"}


@app.get("/jobs", response_model=JobsResponse, tags=["data"])
def list_jobs(
    session: Session = Depends(db_session),
    cache: ResponseCache = Depends(response_cache),
):
    """All persisted culture.be jobs, newest first.

    Rows that fail schema validation are left out of the response.
    """
    steps = _steps()
    steps.info("Received request for persisted culture.be jobs")

    cached = cache.get(JOBS_CACHE_KEY)
    if cached is not None:
        return JobsResponse(
            data=cached["data"],
            fetched_at=datetime.now(timezone.utc),
            last_synced_at=cached.get("last_synced_at"),
        )

    try:
        rows = crud.list_jobs(session)
        last_synced_at = crud.get_last_synced_at(session)
    except CultureJobsError as exc:
        steps.error("Failed to fetch persisted jobs", {"error": str(exc)})
        raise HTTPException(status_code=500, detail="Failed to fetch job offers")

    items: list[JobOut] = []
    dropped = 0
    for row in rows:
        try:
            items.append(job_to_out(row))
        except ValidationError as exc:
            dropped += 1
            LOGGER.warning("jobs list dropped uid=%s reason=%s", row.uid, exc)
    if dropped:
        steps.warn("Dropped invalid job records", {"dropped": dropped, "kept": len(items)})

    response = JobsResponse(
        data=items,
        fetched_at=datetime.now(timezone.utc),
        last_synced_at=last_synced_at,
    )
    cache.set(
        JOBS_CACHE_KEY,
        {
            "data": [item.model_dump(mode="json") for item in items],
            "last_synced_at": last_synced_at.isoformat() if last_synced_at else None,
        },
        config.cache_ttl(),
    )
    return response


@app.post("/jobs/sync", response_model=SyncResponse, tags=["admin"])
def sync_jobs(
    session: Session = Depends(db_session),
    cache: ResponseCache = Depends(response_cache),
    provider: CultureBeProvider = Depends(culture_be_provider),
):
    steps = _steps()
    steps.info("Received request to sync new culture.be jobs")
    try:
        summary = sync_new_jobs(session, provider=provider, log_step=steps)
    except Exception as exc:
        steps.error("Failed to sync culture.be jobs", {"error": str(exc)})
        raise HTTPException(status_code=502, detail="Failed to sync job offers")
    finally:
        cache.delete(JOBS_CACHE_KEY)
    return SyncResponse(**summary.to_dict())


@app.get("/jobs/{job_id}", response_model=JobOut, tags=["data"])
def get_job(
    job_id: int = Path(..., gt=0),
    session: Session = Depends(db_session),
):
    steps = _steps()
    steps.info("Received request for a specific persisted job", {"uid": job_id})
    try:
        job = crud.get_job_by_uid(session, job_id)
        if job is None:
            raise HTTPException(status_code=404, detail="Job not found")
        return job_to_out(job)
    except CultureJobsError as exc:
        steps.error("Failed to fetch persisted job", {"uid": job_id, "error": str(exc)})
        raise HTTPException(status_code=500, detail="Failed to fetch job offer")
