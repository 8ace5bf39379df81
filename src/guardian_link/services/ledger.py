"""In-memory ledger of help requests and their assignment state."""

import logging
from dataclasses import dataclass, field, replace

from guardian_link.domain.help_requests import (
    AssignResult,
    AssignStatus,
    HelpPayload,
    HelpRequestEntry,
    SubmitOutcome,
    SubmitStatus,
)
from guardian_link.services.clock import Clock, utc_now

_logger = logging.getLogger(__name__)


@dataclass
class HelpRequestLedger:
    """Tracks at most one help request per requester session.

    An entry moves from unassigned to assigned exactly once, through
    ``try_assign``; nothing clears the assignment short of ``withdraw``.
    Callers must serialize access; no method here awaits.
    """

    clock: Clock = utc_now
    _entries: dict[str, HelpRequestEntry] = field(default_factory=dict)

    def submit(
        self, requester_session_id: str, payload: HelpPayload | None
    ) -> SubmitOutcome:
        """Create or refresh a request; assigned requests are left untouched."""
        now = self.clock()
        entry = self._entries.get(requester_session_id)
        if entry is None:
            entry = HelpRequestEntry(
                requester_session_id=requester_session_id,
                payload=payload,
                assigned_guardian_session_id=None,
                created_at=now,
                requested_at=now,
            )
            self._entries[requester_session_id] = entry
            return SubmitOutcome(status=SubmitStatus.CREATED, entry=entry)
        if entry.is_assigned:
            _logger.debug(
                "Suppressing help request for assigned requester",
                extra={"session_id": requester_session_id},
            )
            return SubmitOutcome(status=SubmitStatus.SUPPRESSED, entry=entry)
        entry = replace(entry, payload=payload, requested_at=now)
        self._entries[requester_session_id] = entry
        return SubmitOutcome(status=SubmitStatus.UPDATED, entry=entry)

    def try_assign(
        self, requester_session_id: str, candidate_guardian_session_id: str
    ) -> AssignResult:
        """Bind a guardian to an open request if nobody holds it yet."""
        entry = self._entries.get(requester_session_id)
        if entry is None:
            return AssignResult(status=AssignStatus.NO_SUCH_REQUEST)
        if entry.assigned_guardian_session_id is not None:
            return AssignResult(
                status=AssignStatus.ALREADY_ASSIGNED,
                guardian_session_id=entry.assigned_guardian_session_id,
            )
        self._entries[requester_session_id] = replace(
            entry, assigned_guardian_session_id=candidate_guardian_session_id
        )
        return AssignResult(
            status=AssignStatus.ASSIGNED,
            guardian_session_id=candidate_guardian_session_id,
        )

    def withdraw(self, requester_session_id: str) -> HelpRequestEntry | None:
        """Remove and return the entry for a requester, if any."""
        return self._entries.pop(requester_session_id, None)

    def get(self, requester_session_id: str) -> HelpRequestEntry | None:
        """Return the entry for a requester, if any."""
        return self._entries.get(requester_session_id)

    def entries(self) -> list[HelpRequestEntry]:
        """Return all entries in creation order."""
        return list(self._entries.values())
