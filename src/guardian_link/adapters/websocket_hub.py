"""WebSocket session transport."""

import asyncio
import logging
from dataclasses import dataclass, field
from uuid import uuid4

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from guardian_link.protocol import OutboundMessage, SessionHello

_logger = logging.getLogger(__name__)

# Close code for a client that cannot keep up with its outbox.
_TRY_AGAIN_LATER = 1013


@dataclass
class _Session:
    websocket: WebSocket
    outbox: asyncio.Queue[str]
    writer: asyncio.Task[None] | None = None


@dataclass
class WebSocketHub:
    """Tracks connected sockets by session id and delivers messages to them.

    ``send_to`` and ``broadcast`` never wait on a socket. Each session has a
    bounded outbox drained by its own writer task, so frames reach one client
    in the order they were queued and a slow client only delays itself. A
    session whose outbox fills up is dropped and its socket closed.
    """

    max_pending: int = 256
    _sessions: dict[str, _Session] = field(default_factory=dict)
    _closing: set[asyncio.Task[None]] = field(default_factory=set)

    async def connect(self, websocket: WebSocket) -> str:
        """Accept a socket, assign it a session id and greet it."""
        await websocket.accept()
        session_id = uuid4().hex
        session = _Session(
            websocket=websocket, outbox=asyncio.Queue(maxsize=self.max_pending)
        )
        session.writer = asyncio.create_task(self._write(session_id, session))
        self._sessions[session_id] = session
        _logger.info(
            "Session connected (total: %s)",
            self.session_count(),
            extra={"session_id": session_id},
        )
        self.send_to(session_id, SessionHello(session_id=session_id))
        return session_id

    def disconnect(self, session_id: str) -> None:
        """Forget a session and stop its writer; unknown ids are ignored."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        if session.writer is not None:
            session.writer.cancel()
        _logger.info(
            "Session disconnected (total: %s)",
            self.session_count(),
            extra={"session_id": session_id},
        )

    def session_count(self) -> int:
        """Return the number of connected sessions."""
        return len(self._sessions)

    def send_to(self, session_id: str, message: OutboundMessage) -> None:
        """Queue one message for a session if it is still connected."""
        self._enqueue(session_id, message.to_json())

    def broadcast(self, message: OutboundMessage) -> None:
        """Queue one message for every connected session."""
        text = message.to_json()
        for session_id in list(self._sessions):
            self._enqueue(session_id, text)

    async def close(self) -> None:
        """Stop every writer and close every open socket."""
        for session_id, session in list(self._sessions.items()):
            self.disconnect(session_id)
            if session.websocket.client_state == WebSocketState.CONNECTED:
                try:
                    await session.websocket.close(code=1001)
                except RuntimeError:
                    _logger.warning(
                        "Socket already closed", extra={"session_id": session_id}
                    )
        if self._closing:
            await asyncio.gather(*self._closing, return_exceptions=True)

    def _enqueue(self, session_id: str, text: str) -> None:
        session = self._sessions.get(session_id)
        if session is None:
            return
        try:
            session.outbox.put_nowait(text)
        except asyncio.QueueFull:
            _logger.warning(
                "Dropping session with full outbox (%s pending)",
                session.outbox.qsize(),
                extra={"session_id": session_id},
            )
            self.disconnect(session_id)
            task = asyncio.get_running_loop().create_task(
                self._close_socket(session_id, session.websocket)
            )
            self._closing.add(task)
            task.add_done_callback(self._closing.discard)

    async def _write(self, session_id: str, session: _Session) -> None:
        while True:
            text = await session.outbox.get()
            try:
                await session.websocket.send_text(text)
            except Exception:
                _logger.warning(
                    "Dropping session after failed send",
                    exc_info=True,
                    extra={"session_id": session_id},
                )
                self._sessions.pop(session_id, None)
                return

    async def _close_socket(self, session_id: str, websocket: WebSocket) -> None:
        try:
            await websocket.close(code=_TRY_AGAIN_LATER)
        except Exception:
            _logger.warning(
                "Failed to close dropped session",
                exc_info=True,
                extra={"session_id": session_id},
            )
