"""Differential synchronization of culture.be jobs into the store.

Run shape:

1. scan every listing page (page 1, then the rest in parallel) and dedup by uid
2. diff the scanned uids against the persisted ones
3. fetch detail pages for new uids, at most ``concurrency`` at a time; a
   failing item is recorded and skipped
4. insert new rows (duplicates skipped), delete vanished uids, stamp the
   sync state

A listing failure aborts before anything is written. An empty scan never
deletes: it is treated as an upstream outage.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from culturejobs import config
from culturejobs.core.pool import map_with_concurrency
from culturejobs.core.steplog import StepLogger, resolve_step_logger
from culturejobs.db import crud

from .listing import ListingStub
from .provider import CultureBeProvider

LOGGER = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    synced_at: str
    scanned: int
    existing: int
    new_found: int
    inserted: int
    removed: int
    removed_uids: list[int] = field(default_factory=list)
    failed: int = 0
    failed_uids: list[int] = field(default_factory=list)
    source: str = "culture.be"

    def to_dict(self) -> dict:
        return asdict(self)


def sync_new_jobs(
    session: Session,
    *,
    provider: Optional[CultureBeProvider] = None,
    log_step: Optional[StepLogger] = None,
    concurrency: Optional[int] = None,
) -> SyncSummary:
    provider = provider or CultureBeProvider()
    steps = resolve_step_logger(log_step)
    concurrency = concurrency or config.detail_concurrency()
    source = provider.source

    listings = provider.scan_listings(steps)
    scanned_uids = {job.uid for job in listings}

    persisted = crud.persisted_uids(session, source)
    existing = scanned_uids & persisted
    new_listings = [job for job in listings if job.uid not in existing]
    if listings:
        removed_uids = sorted(persisted - scanned_uids)
    else:
        removed_uids = []

    steps.info(
        "Resolved differential ingestion candidates",
        {"existing": len(existing), "newFound": len(new_listings), "removed": len(removed_uids)},
    )

    def _fetch(listing: ListingStub) -> Optional[dict[str, Any]]:
        try:
            return provider.fetch_detail(listing)
        except Exception as exc:
            steps.warn(
                "Failed to parse job detail page",
                {"uid": listing.uid, "sourceUrl": listing.source_url, "error": str(exc)},
            )
            return None

    results = map_with_concurrency(new_listings, concurrency, _fetch)
    failed_uids = [listing.uid for listing, row in zip(new_listings, results) if row is None]
    rows = [row for row in results if row is not None]

    inserted = crud.insert_jobs(session, rows, source) if rows else 0
    removed = crud.delete_jobs_by_uid(session, removed_uids, source) if removed_uids else 0

    if not listings and persisted:
        steps.warn(
            "Skipping stale culture.be deletion because listing scrape returned zero jobs",
            {"persistedCount": len(persisted)},
        )
        LOGGER.warning("culture-be empty scan, skipping deletion persisted=%s", len(persisted))

    synced_at = datetime.now(timezone.utc)
    summary = SyncSummary(
        synced_at=synced_at.isoformat(),
        scanned=len(listings),
        existing=len(existing),
        new_found=len(new_listings),
        inserted=inserted,
        removed=removed,
        removed_uids=removed_uids,
        failed=len(failed_uids),
        failed_uids=failed_uids,
        source=provider.label,
    )

    crud.upsert_sync_state(session, synced_at, source)

    steps.info("Culture.be job sync completed", summary.to_dict())
    LOGGER.info(
        "culture-be sync scanned=%s new=%s inserted=%s removed=%s failed=%s",
        summary.scanned,
        summary.new_found,
        summary.inserted,
        summary.removed,
        summary.failed,
    )
    return summary
