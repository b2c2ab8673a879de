from __future__ import annotations

from datetime import datetime, timezone
import re
from typing import Optional

from .normalize import normalize_text, strip_html_to_text

DMY_DATE = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")
DMY_TOKEN = re.compile(r"\b(\d{2}-\d{2}-\d{4})\b")


def parse_board_date(text: Optional[str]) -> datetime | None:
    """Parse a strict ``DD-MM-YYYY`` string into a UTC-midnight datetime.

    Rejects day outside 1-31, month outside 1-12 and years before 1900.
    A day the month doesn't have (31-02-2025) is also rejected.
    """
    m = DMY_DATE.match(normalize_text(text))
    if not m:
        return None
    day, month, year = map(int, m.groups())
    if not (1 <= day <= 31) or not (1 <= month <= 12) or year < 1900:
        return None
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None


def format_board_date(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%d-%m-%Y")


def find_date_token(html: Optional[str]) -> Optional[str]:
    """First ``DD-MM-YYYY`` token in the plain text of an HTML fragment."""
    m = DMY_TOKEN.search(strip_html_to_text(html))
    return m.group(1) if m else None
