from .fetch import Fetcher
from .listing import ListingStub, ListingPage, parse_listing_page
from .detail import DetailField, ParsedDetail, parse_job_detail
from .provider import CultureBeProvider
from .sync import SyncSummary, sync_new_jobs

__all__ = [
    "Fetcher",
    "ListingStub",
    "ListingPage",
    "parse_listing_page",
    "DetailField",
    "ParsedDetail",
    "parse_job_detail",
    "CultureBeProvider",
    "SyncSummary",
    "sync_new_jobs",
]
