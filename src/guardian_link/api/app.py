"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import PlainTextResponse

from guardian_link.adapters.websocket_hub import WebSocketHub
from guardian_link.api.state_models import HelpRequestView, StateView
from guardian_link.app_logging import configure_logging
from guardian_link.containers import AppContainer
from guardian_link.protocol import GuardianView, ProtocolError, parse_frame


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/", response_class=PlainTextResponse)
    async def index() -> str:
        return "Guardian server running"

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/state")
    async def state(request: Request) -> dict[str, object]:
        """Return the current guardians and help requests without mutating them."""
        state_container: AppContainer = request.app.state.container
        view = StateView(
            sessions=state_container.hub.session_count(),
            guardians=[
                GuardianView.from_record(record)
                for record in state_container.registry.snapshot()
            ],
            help_requests=[
                HelpRequestView.from_entry(entry)
                for entry in state_container.ledger.entries()
            ],
        )
        return view.model_dump(by_alias=True)

    @app.websocket(container.settings.websocket_path)
    async def session_endpoint(websocket: WebSocket) -> None:
        """Run one client session until it disconnects."""
        state_container: AppContainer = websocket.app.state.container
        hub: WebSocketHub = state_container.hub
        coordinator = state_container.coordinator
        session_id = await hub.connect(websocket)
        try:
            coordinator.connect(session_id)
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                raw = frame.get("text")
                if raw is None:
                    logger.warning(
                        "Dropping binary frame", extra={"session_id": session_id}
                    )
                    continue
                try:
                    message = parse_frame(raw)
                except ProtocolError as exc:
                    logger.warning(
                        "Dropping frame: %s", exc, extra={"session_id": session_id}
                    )
                    continue
                coordinator.handle(session_id, message)
        except Exception:
            logger.exception("Session failed", extra={"session_id": session_id})
        finally:
            hub.disconnect(session_id)
            coordinator.disconnect(session_id)

    return app
