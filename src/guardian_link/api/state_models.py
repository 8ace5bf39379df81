"""Pydantic models for the read-only state endpoint."""

from guardian_link.domain.help_requests import HelpRequestEntry
from guardian_link.protocol import GuardianView, WireModel, to_epoch_ms


class HelpRequestView(WireModel):
    """Ledger entry as exposed for diagnostics."""

    requester_session_id: str
    lat: float | None = None
    lng: float | None = None
    assigned_guardian_session_id: str | None = None
    created_at: int
    requested_at: int

    @classmethod
    def from_entry(cls, entry: HelpRequestEntry) -> "HelpRequestView":
        payload = entry.payload
        return cls(
            requester_session_id=entry.requester_session_id,
            lat=payload.lat if payload else None,
            lng=payload.lng if payload else None,
            assigned_guardian_session_id=entry.assigned_guardian_session_id,
            created_at=to_epoch_ms(entry.created_at),
            requested_at=to_epoch_ms(entry.requested_at),
        )


class StateView(WireModel):
    """Point-in-time view of connected sessions, the registry and the ledger."""

    sessions: int
    guardians: list[GuardianView]
    help_requests: list[HelpRequestView]
