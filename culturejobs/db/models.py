from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# --- SQLAlchemy base ---------------------------------------------------------

class Base(DeclarativeBase):
    """Declarative base for all models."""
    pass


# --- Enums -------------------------------------------------------------------

SOURCES = ("CULTURE_BE",)

POSTING_TYPES = ("EMPLOI", "STAGE", "BENEVOLAT", "AUTRE")

CONTRACT_TYPES = ("CDD", "CDI", "AUTRE")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Models ------------------------------------------------------------------

class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (
        # One row per upstream posting
        UniqueConstraint("source", "uid", name="uq_job_source_uid"),
        Index("ix_jobs_source_publication_date", "source", "publication_date"),
        Index("ix_jobs_posting_type", "posting_type"),
        Index("ix_jobs_application_deadline", "application_deadline"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    # Upstream identifiers
    uid: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(
        Enum(*SOURCES, name="job_source_enum", native_enum=False), nullable=False, default="CULTURE_BE"
    )
    source_url: Mapped[str] = mapped_column(Text, nullable=False)
    listing_url: Mapped[str] = mapped_column(Text, nullable=False)

    # Listing row fields
    title: Mapped[str] = mapped_column(Text, nullable=False)
    organization: Mapped[str] = mapped_column(Text, nullable=False)
    publication_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    publication_date_raw: Mapped[str] = mapped_column(String(20), nullable=False)
    posting_type: Mapped[str] = mapped_column(
        Enum(*POSTING_TYPES, name="job_posting_type_enum", native_enum=False), nullable=False
    )
    # list of CONTRACT_TYPES values
    contract_types: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    contract_label: Mapped[Optional[str]] = mapped_column(Text)

    # Detail page fields (sanitized HTML unless noted)
    location: Mapped[Optional[str]] = mapped_column(Text)
    application_deadline: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    application_deadline_raw: Mapped[Optional[str]] = mapped_column(String(20))
    job_description: Mapped[Optional[str]] = mapped_column(Text)
    requirements: Mapped[Optional[str]] = mapped_column(Text)
    contract_details: Mapped[Optional[str]] = mapped_column(Text)
    regime: Mapped[Optional[str]] = mapped_column(Text)
    application_instructions: Mapped[Optional[str]] = mapped_column(Text)
    documents_required: Mapped[Optional[str]] = mapped_column(Text)
    comments: Mapped[Optional[str]] = mapped_column(Text)
    employer_description: Mapped[Optional[str]] = mapped_column(Text)
    employer_sectors: Mapped[Optional[str]] = mapped_column(Text)
    contact_details: Mapped[Optional[str]] = mapped_column(Text)
    more_info: Mapped[Optional[str]] = mapped_column(Text)
    raw_details: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON(none_as_null=True), nullable=True)

    # Bookkeeping
    scraped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Job id={self.id} uid={self.uid} title={self.title!r}>"


class JobSyncState(Base):
    """One row per source: when it was last synchronized."""

    __tablename__ = "job_sync_state"

    source: Mapped[str] = mapped_column(
        Enum(*SOURCES, name="job_source_enum", native_enum=False), primary_key=True
    )
    last_synced_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<JobSyncState source={self.source} last_synced_at={self.last_synced_at}>"


__all__ = [
    "Base",
    "Job",
    "JobSyncState",
    "SOURCES",
    "POSTING_TYPES",
    "CONTRACT_TYPES",
]
