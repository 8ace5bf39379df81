"""Pydantic models for the realtime wire protocol.

Every frame is a JSON object ``{"event": <name>, "data": <payload>}``. Field
names on the wire are camelCase and timestamps are epoch milliseconds.
"""

import json
from datetime import datetime
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from guardian_link.domain.guardians import GuardianRecord
from guardian_link.domain.help_requests import HelpRequestEntry


class ProtocolError(ValueError):
    """Raised when an inbound frame cannot be decoded."""


class WireModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def to_epoch_ms(value: datetime) -> int:
    """Convert a timestamp to integer epoch milliseconds."""
    return int(value.timestamp() * 1000)


# Inbound


class RegisterGuardian(WireModel):
    """Client opts in as a guardian."""

    event: ClassVar[str] = "registerGuardian"

    alias: str | None = None
    lat: float | None = None
    lng: float | None = None


class UpdateLocation(WireModel):
    """Guardian location change."""

    event: ClassVar[str] = "updateLocation"

    lat: float
    lng: float


class RequestHelp(WireModel):
    """Requester asks for help, optionally with a location."""

    event: ClassVar[str] = "requestHelp"

    lat: float | None = None
    lng: float | None = None


class AcceptHelp(WireModel):
    """Guardian attempts to take a help request."""

    event: ClassVar[str] = "acceptHelp"

    requester_session_id: str | None = None


InboundMessage = RegisterGuardian | UpdateLocation | RequestHelp | AcceptHelp

INBOUND_MODELS: dict[str, type[WireModel]] = {
    model.event: model
    for model in (RegisterGuardian, UpdateLocation, RequestHelp, AcceptHelp)
}


class _Frame(BaseModel):
    event: str
    data: dict[str, object] | None = None


def parse_frame(raw: str) -> InboundMessage:
    """Decode a text frame into a typed inbound message."""
    try:
        frame = _Frame.model_validate_json(raw)
    except ValidationError as exc:
        raise ProtocolError(f"Malformed frame: {exc.error_count()} error(s)") from exc
    model = INBOUND_MODELS.get(frame.event)
    if model is None:
        raise ProtocolError(f"Unknown event: {frame.event}")
    try:
        return model.model_validate(frame.data or {})
    except ValidationError as exc:
        raise ProtocolError(f"Invalid {frame.event} payload") from exc


# Outbound


class GuardianView(WireModel):
    """Guardian presence record as seen by clients."""

    session_id: str
    alias: str | None = None
    lat: float | None = None
    lng: float | None = None
    updated_at: int

    @classmethod
    def from_record(cls, record: GuardianRecord) -> "GuardianView":
        return cls(
            session_id=record.session_id,
            alias=record.alias,
            lat=record.lat,
            lng=record.lng,
            updated_at=to_epoch_ms(record.updated_at),
        )


class OutboundMessage(WireModel):
    """Base for messages sent from the server."""

    event: ClassVar[str]

    def envelope(self) -> dict[str, object]:
        return {"event": self.event, "data": self.model_dump(by_alias=True)}

    def to_json(self) -> str:
        return json.dumps(self.envelope())


class SessionHello(OutboundMessage):
    """Tells a freshly connected client its own session id."""

    event: ClassVar[str] = "session"

    session_id: str


class GuardianList(OutboundMessage):
    """Full guardian registry snapshot; ``data`` is a bare list on the wire."""

    event: ClassVar[str] = "guardianList"

    records: list[GuardianView]

    @classmethod
    def from_records(cls, records: list[GuardianRecord]) -> "GuardianList":
        return cls(records=[GuardianView.from_record(record) for record in records])

    def envelope(self) -> dict[str, object]:
        return {
            "event": self.event,
            "data": [record.model_dump(by_alias=True) for record in self.records],
        }


class HelpRequestNotice(OutboundMessage):
    """Open help request announced to every session."""

    event: ClassVar[str] = "helpRequest"

    requester_session_id: str
    lat: float | None = None
    lng: float | None = None
    requested_at: int

    @classmethod
    def from_entry(cls, entry: HelpRequestEntry) -> "HelpRequestNotice":
        payload = entry.payload
        return cls(
            requester_session_id=entry.requester_session_id,
            lat=payload.lat if payload else None,
            lng=payload.lng if payload else None,
            requested_at=to_epoch_ms(entry.requested_at),
        )


class HelpAssigned(OutboundMessage):
    """A request has been taken; clients drop it from their pending queue."""

    event: ClassVar[str] = "helpAssigned"

    requester_session_id: str
    guardian_session_id: str
    guardian: GuardianView | None = None


class HelpAlreadyAssigned(OutboundMessage):
    """Sent to a guardian whose accept lost or targeted no open request."""

    event: ClassVar[str] = "helpAlreadyAssigned"

    requester_session_id: str
    assigned_guardian_session_id: str | None = None


class HelpAccepted(OutboundMessage):
    """Sent to the requester once a guardian has been assigned."""

    event: ClassVar[str] = "helpAccepted"

    guardian_session_id: str
    guardian: GuardianView | None = None


class HelpWithdrawn(OutboundMessage):
    """The requester disconnected and its request is gone."""

    event: ClassVar[str] = "helpWithdrawn"

    requester_session_id: str
