"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from guardian_link.config import Settings
from guardian_link.containers import AppContainer, build_container
from guardian_link.protocol import OutboundMessage
from guardian_link.services.coordinator import AssignmentCoordinator
from guardian_link.services.ledger import HelpRequestLedger
from guardian_link.services.publisher import Broadcaster, SnapshotPublisher
from guardian_link.services.registry import GuardianRegistry


@dataclass
class StepClock:
    """Clock that advances one second per reading."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@dataclass
class RecordingBroadcaster(Broadcaster):
    """Broadcaster that records deliveries."""

    sent: list[tuple[str, OutboundMessage]] = field(default_factory=list)
    broadcasts: list[OutboundMessage] = field(default_factory=list)

    def send_to(self, session_id: str, message: OutboundMessage) -> None:
        self.sent.append((session_id, message))

    def broadcast(self, message: OutboundMessage) -> None:
        self.broadcasts.append(message)

    def sent_to(self, session_id: str) -> list[OutboundMessage]:
        return [message for target, message in self.sent if target == session_id]

    def events(self) -> list[str]:
        return [message.event for message in self.broadcasts]

    def clear(self) -> None:
        self.sent.clear()
        self.broadcasts.clear()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def broadcaster() -> RecordingBroadcaster:
    return RecordingBroadcaster()


@pytest.fixture
def registry(clock: StepClock) -> GuardianRegistry:
    return GuardianRegistry(clock=clock)


@pytest.fixture
def ledger(clock: StepClock) -> HelpRequestLedger:
    return HelpRequestLedger(clock=clock)


@pytest.fixture
def coordinator(
    registry: GuardianRegistry,
    ledger: HelpRequestLedger,
    broadcaster: RecordingBroadcaster,
) -> AssignmentCoordinator:
    return AssignmentCoordinator(
        registry=registry,
        ledger=ledger,
        publisher=SnapshotPublisher(registry=registry, broadcaster=broadcaster),
        broadcaster=broadcaster,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test", log_level="DEBUG", websocket_path="/ws")


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    return build_container(settings)
