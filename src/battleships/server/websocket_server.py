"""WebSocket transport for the match server.

Frames are JSON objects {"event": name, "data": {...}} in both directions.
Connection handlers only enqueue events; a single worker task owns the
SessionManager, applies each event to completion and delivers every
resulting message before taking the next one.
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Optional, Protocol

import websockets
from websockets.asyncio.server import Server, ServerConnection, serve

from battleships.engine.session_manager import SessionManager
from battleships.events import EventName, Outbound

logger = logging.getLogger(__name__)


class Sender(Protocol):
    """Anything frames can be sent to (a websocket connection in production)."""

    async def send(self, message: str) -> None:
        ...


class BattleshipsServer:
    """WebSocket server that serializes all events through one queue."""

    def __init__(
        self,
        manager: SessionManager,
        host: str = "localhost",
        port: int = 3000,
    ):
        self.manager = manager
        self.host = host
        self.port = port
        self.connections: dict[str, Sender] = {}
        self._queue: asyncio.Queue[tuple[str, str, Any]] = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None
        self._server: Optional[Server] = None

    async def start(self) -> None:
        """Start the event worker and the WebSocket listener."""
        self.start_worker()
        self._server = await serve(self._handle_client, self.host, self.port)
        logger.info(f"WebSocket server started on ws://{self.host}:{self.port}")

    def start_worker(self) -> None:
        if self._worker is None:
            self._worker = asyncio.create_task(self._run_worker())

    async def stop(self) -> None:
        """Stop listening, then stop the worker once the queue is drained."""
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        await self._queue.join()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        logger.info("WebSocket server stopped")

    async def submit(self, connection_id: str, event: str, payload: Any = None) -> None:
        """Queue an inbound event for the worker."""
        await self._queue.put((connection_id, event, payload))

    async def drain(self) -> None:
        """Wait until every queued event has been applied and delivered."""
        await self._queue.join()

    async def register(self, connection_id: str, sender: Sender) -> None:
        self.connections[connection_id] = sender
        await self.submit(connection_id, EventName.CONNECT.value)

    async def unregister(self, connection_id: str) -> None:
        self.connections.pop(connection_id, None)
        await self.submit(connection_id, EventName.DISCONNECT.value)

    async def _run_worker(self) -> None:
        while True:
            connection_id, event, payload = await self._queue.get()
            try:
                outbound = self.manager.handle(connection_id, event, payload)
                await self._deliver(outbound)
            except Exception:
                logger.exception("Error handling %s from %s", event, connection_id)
            finally:
                self._queue.task_done()

    async def _deliver(self, outbound: list[Outbound]) -> None:
        """Send messages in order; broadcasts go to every live connection."""
        for message in outbound:
            frame = json.dumps(message.to_frame())
            if message.is_broadcast:
                targets = list(self.connections.items())
            elif message.target in self.connections:
                targets = [(message.target, self.connections[message.target])]
            else:
                targets = []
            for connection_id, sender in targets:
                try:
                    await sender.send(frame)
                except websockets.exceptions.ConnectionClosed:
                    logger.warning("Send to closed connection %s dropped", connection_id)

    async def _handle_client(self, websocket: ServerConnection) -> None:
        """Handle a single client connection."""
        connection_id = str(uuid.uuid4())
        await self.register(connection_id, websocket)
        logger.info(f"Client {connection_id} connected. Total clients: {len(self.connections)}")

        try:
            async for raw in websocket:
                await self._handle_frame(connection_id, raw)
        except websockets.exceptions.ConnectionClosed:
            logger.info(f"Client {connection_id} disconnected")
        finally:
            await self.unregister(connection_id)
            logger.info(f"Client {connection_id} removed. Total clients: {len(self.connections)}")

    async def _handle_frame(self, connection_id: str, raw: str | bytes) -> None:
        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON received: {str(raw)[:100]}")
            return
        if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
            logger.debug("Dropping frame without an event name from %s", connection_id)
            return
        # Open/close come from the socket itself, never from client frames
        if frame["event"] in (EventName.CONNECT.value, EventName.DISCONNECT.value):
            return
        await self.submit(connection_id, frame["event"], frame.get("data"))


async def run_server(manager: SessionManager, host: str = "localhost", port: int = 3000) -> None:
    """Run the WebSocket server until cancelled."""
    server = BattleshipsServer(manager, host, port)
    await server.start()

    try:
        await asyncio.Future()
    except asyncio.CancelledError:
        await server.stop()
        raise
