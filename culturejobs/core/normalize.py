from __future__ import annotations

import re
import unicodedata
from typing import Optional

from bs4 import BeautifulSoup

WS_RE = re.compile(r"\s+")
COMBINING_RE = re.compile("[\u0300-\u036f]")
NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def normalize_text(value: Optional[str]) -> str:
    """Collapse every whitespace run (non-breaking spaces included) and trim."""
    return WS_RE.sub(" ", (value or "").replace("\u00a0", " ")).strip()


def normalize_multiline_text(value: Optional[str]) -> str:
    """Like normalize_text, but keeps one line per non-blank input line."""
    text = (value or "").replace("\u00a0", " ").replace("\r", "")
    lines = (WS_RE.sub(" ", line).strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line).strip()


def normalize_key(value: Optional[str]) -> str:
    """Matching key: no accents, lowercase, alphanumeric words separated by one space.

    Only used to compare labels and section names, never for display.
    """
    decomposed = unicodedata.normalize("NFD", value or "")
    stripped = COMBINING_RE.sub("", decomposed).lower()
    return NON_ALNUM_RE.sub(" ", stripped).strip()


def strip_html_to_text(html: Optional[str]) -> str:
    if not html:
        return ""
    return normalize_text(BeautifulSoup(html, "html.parser").get_text())


def parse_positive_int(value: Optional[str]) -> Optional[int]:
    """Leading-digits integer parse; anything that isn't a positive integer gives None."""
    if not value:
        return None
    m = re.match(r"\s*\+?(\d+)", value)
    if not m:
        return None
    parsed = int(m.group(1))
    return parsed if parsed > 0 else None
