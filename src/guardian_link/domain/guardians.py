"""Domain models for guardian presence."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class GuardianRecord:
    """Presence record for a session registered as a guardian."""

    session_id: str
    alias: str | None
    lat: float | None
    lng: float | None
    updated_at: datetime
