from __future__ import annotations

import logging
from typing import Any, Optional

from culturejobs.core.dedupe import deduplicate_by_uid
from culturejobs.core.pool import map_with_concurrency
from culturejobs.core.steplog import StepLogger, resolve_step_logger

from .detail import parse_job_detail
from .fetch import Fetcher
from .listing import ListingPage, ListingStub, build_listing_url, parse_listing_page

log = logging.getLogger(__name__)


class CultureBeProvider:
    """Fetch + parse operations for www.culture.be job offers."""

    name = "culture_be"
    source = "CULTURE_BE"
    label = "culture.be"

    def __init__(self, fetcher: Optional[Fetcher] = None):
        self.fetcher = fetcher or Fetcher()

    def fetch_listing_page(self, page: int) -> ListingPage:
        page_url = build_listing_url(page)
        html = self.fetcher.get(page_url)
        return parse_listing_page(html, page_url)

    def scan_listings(self, log_step: Optional[StepLogger] = None) -> list[ListingStub]:
        """Every listing row across all pages, deduplicated by uid (last row wins).

        Page 1 is fetched first to learn the page count, the others in parallel.
        Any page failure propagates.
        """
        steps = resolve_step_logger(log_step)

        steps.info("Fetching first culture.be listing page")
        first = self.fetch_listing_page(1)
        # Page 1 itself can report fewer pages than the one just fetched
        total_pages = max(first.total_pages, 1)
        remaining = list(range(2, total_pages + 1))
        steps.info(
            "Resolved listing pagination",
            {"totalPages": total_pages, "firstPageJobs": len(first.jobs)},
        )

        pages = map_with_concurrency(remaining, len(remaining), self.fetch_listing_page)
        merged = list(first.jobs)
        for page in pages:
            merged.extend(page.jobs)
        deduped = deduplicate_by_uid(merged)

        steps.info(
            "Listing pages scanned",
            {"scannedRows": len(merged), "dedupedRows": len(deduped)},
        )
        return deduped

    def fetch_detail(self, listing: ListingStub) -> dict[str, Any]:
        """Insert-ready row: the listing columns plus everything parsed from the detail page."""
        html = self.fetcher.get(listing.source_url)
        detail = parse_job_detail(html)
        row = listing.model_dump()
        row.update(detail.to_dict())
        row["source"] = self.source
        return row
