"""Assignment state machine driving the registry and ledger."""

import logging
from dataclasses import dataclass

from guardian_link.domain.help_requests import AssignStatus, HelpPayload
from guardian_link.protocol import (
    AcceptHelp,
    GuardianView,
    HelpAccepted,
    HelpAlreadyAssigned,
    HelpAssigned,
    HelpRequestNotice,
    HelpWithdrawn,
    InboundMessage,
    RegisterGuardian,
    RequestHelp,
    UpdateLocation,
)
from guardian_link.services.ledger import HelpRequestLedger
from guardian_link.services.publisher import Broadcaster, SnapshotPublisher
from guardian_link.services.registry import GuardianRegistry

_logger = logging.getLogger(__name__)


@dataclass
class AssignmentCoordinator:
    """Applies inbound events one at a time and emits the resulting messages.

    Handlers are plain functions called from the event loop. None of them
    awaits, and the broadcaster only queues, so each event is applied and its
    messages queued before the next event is looked at. Two accepts for the
    same requester are therefore strictly ordered and clients see messages in
    processing order.
    """

    registry: GuardianRegistry
    ledger: HelpRequestLedger
    publisher: SnapshotPublisher
    broadcaster: Broadcaster

    def handle(self, session_id: str, message: InboundMessage) -> None:
        """Dispatch a decoded inbound message from a session."""
        if isinstance(message, RegisterGuardian):
            self.register_guardian(session_id, message)
        elif isinstance(message, UpdateLocation):
            self.update_location(session_id, message)
        elif isinstance(message, RequestHelp):
            self.request_help(session_id, message)
        elif isinstance(message, AcceptHelp):
            self.accept_help(session_id, message)

    def connect(self, session_id: str) -> None:
        """Initialize a new session's view with the guardian snapshot."""
        self.publisher.send_initial(session_id)

    def register_guardian(self, session_id: str, message: RegisterGuardian) -> None:
        self.registry.register(
            session_id, alias=message.alias, lat=message.lat, lng=message.lng
        )
        self.publisher.publish()

    def update_location(self, session_id: str, message: UpdateLocation) -> None:
        if self.registry.update_location(session_id, message.lat, message.lng):
            self.publisher.publish()

    def request_help(self, session_id: str, message: RequestHelp) -> None:
        outcome = self.ledger.submit(
            session_id, HelpPayload(lat=message.lat, lng=message.lng)
        )
        if not outcome.should_broadcast:
            return
        _logger.info(
            "Help request %s", outcome.status.value, extra={"session_id": session_id}
        )
        self.broadcaster.broadcast(HelpRequestNotice.from_entry(outcome.entry))

    def accept_help(self, session_id: str, message: AcceptHelp) -> None:
        """Try to assign the acting guardian to a requester's open request."""
        requester_id = message.requester_session_id
        if not requester_id:
            return
        result = self.ledger.try_assign(requester_id, session_id)
        if result.status is not AssignStatus.ASSIGNED:
            self.broadcaster.send_to(
                session_id,
                HelpAlreadyAssigned(
                    requester_session_id=requester_id,
                    assigned_guardian_session_id=result.guardian_session_id,
                ),
            )
            return
        _logger.info(
            "Help request assigned: requester=%s guardian=%s",
            requester_id,
            session_id,
        )
        record = self.registry.get(session_id)
        guardian = GuardianView.from_record(record) if record else None
        self.broadcaster.send_to(
            requester_id,
            HelpAccepted(guardian_session_id=session_id, guardian=guardian),
        )
        self.broadcaster.broadcast(
            HelpAssigned(
                requester_session_id=requester_id,
                guardian_session_id=session_id,
                guardian=guardian,
            )
        )

    def disconnect(self, session_id: str) -> None:
        """Drop every trace of a session and tell the others."""
        self.registry.remove(session_id)
        withdrawn = self.ledger.withdraw(session_id)
        self.publisher.publish()
        if withdrawn is not None:
            self.broadcaster.broadcast(HelpWithdrawn(requester_session_id=session_id))
