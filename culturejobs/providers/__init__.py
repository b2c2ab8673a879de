from __future__ import annotations
from typing import Dict, Optional, Protocol, Sequence

from culturejobs.core.steplog import StepLogger


class Provider(Protocol):
    name: str
    source: str
    label: str

    def scan_listings(self, log_step: Optional[StepLogger] = None) -> Sequence: ...


# Provider registry; only culture.be exists today
REGISTRY: Dict[str, Provider] = {}


def register(provider: Provider) -> None:
    REGISTRY[provider.name] = provider


def get(name: str) -> Provider:
    return REGISTRY[name]


from .culture_be import CultureBeProvider  # noqa: E402

register(CultureBeProvider())
