"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from guardian_link.adapters.websocket_hub import WebSocketHub
from guardian_link.config import Settings
from guardian_link.services.coordinator import AssignmentCoordinator
from guardian_link.services.ledger import HelpRequestLedger
from guardian_link.services.publisher import SnapshotPublisher
from guardian_link.services.registry import GuardianRegistry


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    hub: WebSocketHub
    registry: GuardianRegistry
    ledger: HelpRequestLedger
    publisher: SnapshotPublisher
    coordinator: AssignmentCoordinator
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    hub = WebSocketHub(max_pending=resolved_settings.outbox_limit)
    registry = GuardianRegistry()
    ledger = HelpRequestLedger()
    publisher = SnapshotPublisher(registry=registry, broadcaster=hub)
    coordinator = AssignmentCoordinator(
        registry=registry,
        ledger=ledger,
        publisher=publisher,
        broadcaster=hub,
    )

    async def close_resources() -> None:
        await hub.close()

    return AppContainer(
        settings=resolved_settings,
        hub=hub,
        registry=registry,
        ledger=ledger,
        publisher=publisher,
        coordinator=coordinator,
        close_resources=close_resources,
    )
