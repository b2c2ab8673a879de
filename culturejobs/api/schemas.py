from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Literal, Optional

import pydantic
from pydantic import BaseModel, Field, field_validator

from culturejobs.core.deadline import deadline_info
from culturejobs.db.models import Job
from culturejobs.errors import ValidationError

LEGACY_POSTING_TYPE = {
    "BENEVOLAT": "bénévolat",
    "EMPLOI": "emploi",
    "STAGE": "stage",
    "AUTRE": "autre",
}


class JobOut(BaseModel):
    id: str = Field(min_length=1)
    uid: int = Field(gt=0)
    link: str
    listing_url: str
    title: str = Field(min_length=1)
    employer: str = Field(min_length=1)
    date: str = Field(min_length=1)  # publication date as shown upstream
    publication_date: datetime
    contract: Optional[str] = None
    contract_types: List[Literal["CDD", "CDI", "AUTRE"]] = []
    type: str
    job_type: Literal["EMPLOI", "STAGE", "BENEVOLAT", "AUTRE"]
    location: Optional[str] = None
    application_deadline: Optional[datetime] = None
    application_deadline_raw: Optional[str] = None
    deadline_status: str = "unknown"
    days_left: Optional[int] = None
    job_description: Optional[str] = None
    requirements: Optional[str] = None
    contract_details: Optional[str] = None
    regime: Optional[str] = None
    application_instructions: Optional[str] = None
    documents_required: Optional[str] = None
    comments: Optional[str] = None
    employer_description: Optional[str] = None
    employer_sectors: Optional[str] = None
    contact_details: Optional[str] = None
    more_info: Optional[str] = None
    raw_details: Optional[dict[str, Any]] = None
    last_updated: datetime

    @field_validator("link")
    @classmethod
    def _absolute_link(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("link must be an absolute http(s) URL")
        return value


class JobsResponse(BaseModel):
    data: List[JobOut]
    source: Literal["culture.be"] = "culture.be"
    fetched_at: datetime
    last_synced_at: Optional[datetime] = None


class SyncResponse(BaseModel):
    source: Literal["culture.be"] = "culture.be"
    synced_at: datetime
    scanned: int
    existing: int
    new_found: int
    inserted: int
    removed: int
    removed_uids: List[int]
    failed: int
    failed_uids: List[int]


def job_to_out(job: Job, *, today: Optional[date] = None) -> JobOut:
    """Project a persisted Job for the API; raises ValidationError if it doesn't fit the schema."""
    status, days_left = deadline_info(job.application_deadline, today=today)
    try:
        return JobOut(
            id=str(job.uid),
            uid=job.uid,
            link=job.source_url,
            listing_url=job.listing_url,
            title=job.title,
            employer=job.organization,
            date=job.publication_date_raw,
            publication_date=job.publication_date,
            contract=job.contract_label,
            contract_types=list(job.contract_types or []),
            type=LEGACY_POSTING_TYPE.get(job.posting_type, "autre"),
            job_type=job.posting_type,
            location=job.location,
            application_deadline=job.application_deadline,
            application_deadline_raw=job.application_deadline_raw,
            deadline_status=status,
            days_left=days_left,
            job_description=job.job_description,
            requirements=job.requirements,
            contract_details=job.contract_details,
            regime=job.regime,
            application_instructions=job.application_instructions,
            documents_required=job.documents_required,
            comments=job.comments,
            employer_description=job.employer_description,
            employer_sectors=job.employer_sectors,
            contact_details=job.contact_details,
            more_info=job.more_info,
            raw_details=job.raw_details,
            last_updated=job.last_updated,
        )
    except pydantic.ValidationError as exc:
        raise ValidationError(f"job uid={job.uid} failed validation: {exc.error_count()} error(s)") from exc
