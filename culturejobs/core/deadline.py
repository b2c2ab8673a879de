from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal, Optional, Tuple

DeadlineStatus = Literal["expired", "urgent", "near", "soon", "ok", "unknown"]


def deadline_info(
    deadline: Optional[datetime],
    *,
    today: Optional[date] = None,
) -> Tuple[DeadlineStatus, Optional[int]]:
    """Return (status, days_left) for an application deadline.

    Tiers:
      - unknown  -> no deadline
      - expired  -> deadline has passed
      - urgent   -> 0-3 days left
      - near     -> 4-7 days left
      - soon     -> 8-14 days left
      - ok       -> more than 14 days left
    """
    if deadline is None:
        return "unknown", None

    today = today or datetime.now(timezone.utc).date()
    if deadline.tzinfo is not None:
        deadline = deadline.astimezone(timezone.utc)
    days_left = (deadline.date() - today).days

    if days_left < 0:
        return "expired", days_left
    if days_left <= 3:
        return "urgent", days_left
    if days_left <= 7:
        return "near", days_left
    if days_left <= 14:
        return "soon", days_left
    return "ok", days_left
