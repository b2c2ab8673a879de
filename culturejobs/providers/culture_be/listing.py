"""Parse the paginated culture.be job listing into lightweight stubs.

Each listing row carries enough to deduplicate and diff (the upstream ``uid``
from the detail link) plus the summary columns that are persisted verbatim.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional
from urllib.parse import parse_qs, urlencode, urljoin, urlsplit

from bs4 import BeautifulSoup
from bs4.element import Tag
from pydantic import BaseModel

from culturejobs.core.date_parse import parse_board_date
from culturejobs.core.normalize import normalize_key, normalize_text, parse_positive_int

log = logging.getLogger(__name__)

ORIGIN = "https://www.culture.be"
JOBS_PATH = "/vous-cherchez/emploi-stage/"
PAGE_PARAM = "cfwb_form[cfwb_form.list_offre_emploi][page]"

ROW_SELECTOR = "tr.data-row-1, tr.data-row-2"
PAGE_COUNTER_RE = re.compile(r"(\d+)\s*/\s*(\d+)")

PostingType = Literal["EMPLOI", "STAGE", "BENEVOLAT", "AUTRE"]
ContractType = Literal["CDD", "CDI", "AUTRE"]


class ListingStub(BaseModel):
    uid: int
    source_url: str
    listing_url: str
    title: str
    organization: str
    publication_date: datetime
    publication_date_raw: str
    posting_type: PostingType
    contract_label: Optional[str] = None
    contract_types: list[ContractType] = []


@dataclass
class ListingPage:
    page_url: str
    total_pages: int
    jobs: List[ListingStub] = field(default_factory=list)


def build_listing_url(page: int) -> str:
    url = urljoin(ORIGIN, JOBS_PATH)
    if page > 1:
        url = f"{url}?{urlencode({PAGE_PARAM: page})}"
    return url


def to_absolute_url(href: Optional[str]) -> str:
    try:
        return urljoin(ORIGIN, href or "")
    except ValueError:
        return urljoin(ORIGIN, JOBS_PATH)


def _query_param(url: str, name: str) -> Optional[str]:
    try:
        values = parse_qs(urlsplit(url).query).get(name)
    except ValueError:
        return None
    return values[0] if values else None


def parse_posting_type(value: Optional[str]) -> PostingType:
    key = normalize_key(value)
    if "benevolat" in key:
        return "BENEVOLAT"
    if "stage" in key or "stagiaire" in key:
        return "STAGE"
    if "emploi" in key:
        return "EMPLOI"
    return "AUTRE"


def parse_contract_types(value: Optional[str]) -> list[ContractType]:
    found: list[ContractType] = []
    for token in (normalize_key(t) for t in (value or "").split(",")):
        if not token:
            continue
        for needle, contract in (("cdd", "CDD"), ("cdi", "CDI"), ("autre", "AUTRE")):
            if needle in token and contract not in found:
                found.append(contract)
    return found


def _cell_text(row: Tag, selector: str) -> str:
    el = row.select_one(selector)
    return normalize_text(el.get_text()) if el is not None else ""


def parse_total_pages(soup: BeautifulSoup) -> int:
    """Total page count from the "n / total" footer, else the last-page link, else 1."""
    counter = soup.select_one('tr.bottom-row td[align="center"]')
    if counter is not None:
        m = PAGE_COUNTER_RE.search(normalize_text(counter.get_text()))
        total = parse_positive_int(m.group(2)) if m else None
        if total:
            return total

    last_link = soup.select_one('a[id$="_pagelink_last"]')
    href = last_link.get("href") if last_link is not None else None
    if isinstance(href, str) and href:
        last_page = parse_positive_int(_query_param(to_absolute_url(href), PAGE_PARAM))
        if last_page:
            return last_page

    return 1


def parse_listing_rows(soup: BeautifulSoup, listing_url: str) -> list[ListingStub]:
    jobs: list[ListingStub] = []
    skipped = 0

    for row in soup.select(ROW_SELECTOR):
        link = row.select_one(".col-infos a")
        href = link.get("href") if link is not None else None
        source_url = to_absolute_url(normalize_text(href if isinstance(href, str) else None))

        uid = parse_positive_int(_query_param(source_url, "uid"))
        if not uid:
            skipped += 1
            continue

        publication_date_raw = _cell_text(row, ".col-date_publication span")
        publication_date = parse_board_date(publication_date_raw)
        if publication_date is None:
            skipped += 1
            continue

        contract_label = _cell_text(row, ".col-type_contrat span") or None

        jobs.append(
            ListingStub(
                uid=uid,
                source_url=source_url,
                listing_url=listing_url,
                title=_cell_text(row, ".col-intitule span"),
                organization=_cell_text(row, ".col-employeur span"),
                publication_date=publication_date,
                publication_date_raw=publication_date_raw,
                posting_type=parse_posting_type(_cell_text(row, ".col-type_poste span")),
                contract_label=contract_label,
                contract_types=parse_contract_types(contract_label),
            )
        )

    if skipped:
        log.debug("culture-be listing url=%s kept=%s skipped=%s", listing_url, len(jobs), skipped)
    return jobs


def parse_listing_page(html: str, listing_url: str) -> ListingPage:
    soup = BeautifulSoup(html or "", "html.parser")
    return ListingPage(
        page_url=listing_url,
        total_pages=parse_total_pages(soup),
        jobs=parse_listing_rows(soup, listing_url),
    )
