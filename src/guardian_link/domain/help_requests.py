"""Domain models for help requests and their assignment."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class HelpPayload:
    """Location attached to a help request."""

    lat: float | None = None
    lng: float | None = None


@dataclass(frozen=True)
class HelpRequestEntry:
    """Open or assigned help request keyed by the requester session."""

    requester_session_id: str
    payload: HelpPayload | None
    assigned_guardian_session_id: str | None
    created_at: datetime
    requested_at: datetime

    @property
    def is_assigned(self) -> bool:
        return self.assigned_guardian_session_id is not None


class SubmitStatus(Enum):
    """Result kinds for submitting a help request."""

    CREATED = "created"
    UPDATED = "updated"
    SUPPRESSED = "suppressed"


@dataclass(frozen=True)
class SubmitOutcome:
    """Outcome of a submit; ``entry`` is the stored entry after the call."""

    status: SubmitStatus
    entry: HelpRequestEntry

    @property
    def should_broadcast(self) -> bool:
        return self.status is not SubmitStatus.SUPPRESSED


class AssignStatus(Enum):
    """Result kinds for an assignment attempt."""

    NO_SUCH_REQUEST = "no_such_request"
    ALREADY_ASSIGNED = "already_assigned"
    ASSIGNED = "assigned"


@dataclass(frozen=True)
class AssignResult:
    """Outcome of an assignment attempt.

    ``guardian_session_id`` is the winner for ``ALREADY_ASSIGNED`` and
    ``ASSIGNED`` and ``None`` for ``NO_SUCH_REQUEST``.
    """

    status: AssignStatus
    guardian_session_id: str | None = None
