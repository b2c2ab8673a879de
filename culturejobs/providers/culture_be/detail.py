"""Detail page parsing and field resolution for culture.be job offers.

A detail page is a single ``#cfwb_form.single`` container holding section
headers (``p.single_block``) followed by label/value blocks
(``dl.single_element``). Parsing flattens that into an ordered list of
``DetailField``s; resolution then picks the logical fields out of it by fuzzy
label/section matching, in a fixed priority order.
"""
from __future__ import annotations

import copy
import html as html_lib
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from culturejobs.core.date_parse import find_date_token, parse_board_date
from culturejobs.core.normalize import (
    normalize_key,
    normalize_multiline_text,
    normalize_text,
    strip_html_to_text,
)
from culturejobs.core.sanitize import sanitize_html

log = logging.getLogger(__name__)

ROOT_ID = "cfwb_form.single"
BLOCK_SELECTOR = "p.single_block, dl.single_element"
DEFAULT_SECTION = "General"

RawDetails = Dict[str, Dict[str, str]]


@dataclass
class DetailField:
    section: str
    label: str
    value: str


@dataclass
class ParsedDetail:
    location: Optional[str] = None
    application_deadline: Optional[datetime] = None
    application_deadline_raw: Optional[str] = None
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
    raw_details: Optional[RawDetails] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# --- parsing -----------------------------------------------------------------

def parse_detail_value(value_el: Optional[Tag]) -> str:
    """Sanitized inner markup, or one escaped paragraph when the element holds only text."""
    if value_el is None:
        return ""
    if value_el.find(True) is None:
        text = normalize_multiline_text(value_el.get_text())
        return f"<p>{html_lib.escape(text)}</p>" if text else ""
    return sanitize_html(value_el.decode_contents())


def _section_title(block: Tag) -> str:
    clone = copy.copy(block)
    for hr in clone.find_all("hr"):
        hr.decompose()
    return normalize_text(clone.get_text())


def parse_detail_fields(soup: BeautifulSoup) -> tuple[List[DetailField], RawDetails]:
    root = soup.find(id=ROOT_ID)
    if not isinstance(root, Tag):
        return [], {}

    fields: List[DetailField] = []
    raw: RawDetails = {}
    section = DEFAULT_SECTION

    for block in root.select(BLOCK_SELECTOR):
        if block.name == "p":
            title = _section_title(block)
            if title:
                section = title
            continue

        label_el = block.select_one("dt.single_element_label")
        label = normalize_text(label_el.get_text() if label_el is not None else "")
        if label.endswith(":"):
            label = label[:-1].rstrip()
        value = parse_detail_value(block.select_one("dd.single_element_value"))
        if not label or not value:
            continue

        fields.append(DetailField(section=section, label=label, value=value))
        raw.setdefault(section, {})[label] = value

    return fields, raw


# --- resolution --------------------------------------------------------------

def find_detail_value(
    fields: List[DetailField],
    label_needle: str,
    section_needle: Optional[str] = None,
) -> Optional[str]:
    """First field whose label (and section, when given) contains the needle, accent/case-insensitively."""
    label_key = normalize_key(label_needle)
    section_key = normalize_key(section_needle) if section_needle else None

    for f in fields:
        if section_key and section_key not in normalize_key(f.section):
            continue
        if label_key in normalize_key(f.label):
            return f.value
    return None


def first_non_empty(*candidates: Optional[str]) -> Optional[str]:
    for value in candidates:
        if value and strip_html_to_text(value):
            return value
    return None


REQUIREMENT_LABELS = ("Qualifications requises", "Diplômes", "Expériences")


def _labeled_block(label: str, value: str) -> str:
    return f"<p><strong>{html_lib.escape(label)}:</strong></p>{value}"


def parse_requirements(fields: List[DetailField]) -> Optional[str]:
    profile = [f for f in fields if "profil" in normalize_key(f.section)]
    if not profile:
        return None

    preferred = []
    for label in REQUIREMENT_LABELS:
        value = find_detail_value(profile, label)
        if value:
            preferred.append(_labeled_block(label, value))
    if preferred:
        return "".join(preferred)

    return "".join(_labeled_block(f.label, f.value) for f in profile)


def resolve_deadline_raw(soup: BeautifulSoup, fields: List[DetailField]) -> Optional[str]:
    dedicated = soup.select_one('span[id*="date_limite"]')
    return first_non_empty(
        normalize_text(dedicated.get_text()) if dedicated is not None else None,
        find_date_token(find_detail_value(fields, "Candidature", "Modalités de recrutement")),
        find_date_token(find_detail_value(fields, "Modalité", "Conditions")),
    )


def parse_job_detail(html: str) -> ParsedDetail:
    soup = BeautifulSoup(html or "", "html.parser")
    fields, raw = parse_detail_fields(soup)
    if not fields:
        log.debug("culture-be detail page without fields")

    deadline_raw = resolve_deadline_raw(soup, fields)
    employer_contact = first_non_empty(find_detail_value(fields, "Coordonnées", "Organisme employeur"))

    return ParsedDetail(
        location=employer_contact,
        application_deadline=parse_board_date(deadline_raw) if deadline_raw else None,
        application_deadline_raw=deadline_raw,
        job_description=first_non_empty(find_detail_value(fields, "Description", "Fonction")),
        requirements=parse_requirements(fields),
        contract_details=first_non_empty(find_detail_value(fields, "Type de contrat", "Conditions")),
        regime=first_non_empty(find_detail_value(fields, "Régime", "Conditions")),
        application_instructions=first_non_empty(
            find_detail_value(fields, "Candidature", "Modalités de recrutement"),
            find_detail_value(fields, "Modalité", "Conditions"),
        ),
        documents_required=first_non_empty(
            find_detail_value(fields, "Documents requis", "Modalités de recrutement")
        ),
        comments=first_non_empty(find_detail_value(fields, "Commentaires", "Conditions")),
        employer_description=first_non_empty(
            find_detail_value(fields, "Description", "Organisme employeur")
        ),
        employer_sectors=first_non_empty(
            find_detail_value(fields, "Secteur(s) d'activité(s)", "Organisme employeur")
        ),
        contact_details=employer_contact,
        more_info=first_non_empty(find_detail_value(fields, "Plus d'infos", "Modalités de recrutement")),
        raw_details=raw or None,
    )
