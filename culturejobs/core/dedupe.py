from __future__ import annotations
from typing import Dict, Iterable, Protocol, TypeVar


class HasUid(Protocol):
    uid: int


T = TypeVar("T", bound=HasUid)


def deduplicate_by_uid(rows: Iterable[T]) -> list[T]:
    # Later rows replace earlier ones; first-seen position is kept
    seen: Dict[int, T] = {}
    for row in rows:
        seen[row.uid] = row
    return list(seen.values())
