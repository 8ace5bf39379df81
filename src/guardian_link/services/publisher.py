"""Guardian snapshot publishing."""

from dataclasses import dataclass
from typing import Protocol

from guardian_link.protocol import GuardianList, OutboundMessage
from guardian_link.services.registry import GuardianRegistry


class Broadcaster(Protocol):
    """Delivery primitives offered by the session transport.

    Both calls queue the message and return without waiting on any socket.
    """

    def send_to(self, session_id: str, message: OutboundMessage) -> None:
        """Deliver a message to one session; no-op if it is gone."""

    def broadcast(self, message: OutboundMessage) -> None:
        """Deliver a message to every connected session."""


@dataclass
class SnapshotPublisher:
    """Pushes the full guardian list rather than deltas."""

    registry: GuardianRegistry
    broadcaster: Broadcaster

    def current(self) -> GuardianList:
        """Build a guardian list message from the registry as it is now."""
        return GuardianList.from_records(self.registry.snapshot())

    def publish(self) -> None:
        """Broadcast the current snapshot to all sessions."""
        self.broadcaster.broadcast(self.current())

    def send_initial(self, session_id: str) -> None:
        """Send the current snapshot to one newly connected session."""
        self.broadcaster.send_to(session_id, self.current())
