"""
WebSocket server that broadcasts clock state to connected game clients.

All connected clients (the browser HUD, admin time controls) receive
calendar updates, time-event notices and a periodic clock sync message
carrying the current rate and environment. Clients can send commands to
change the rate, pause, resume, advance or jump to the prophecy instant.
"""

import asyncio
import json
import logging
from typing import Any

import websockets
from websockets.asyncio.server import ServerConnection, serve

from realmclock.core.calendar import PROPHECY_START
from realmclock.core.clock import RealmClock
from realmclock.transport.base import TransportAdapter

logger = logging.getLogger(__name__)


class WebSocketAdapter(TransportAdapter):
    """
    WebSocket server broadcasting clock state to game clients.

    On client connect, sends a snapshot of the current clock followed by
    the notice history. Accepts commands from clients (set_rate, pause,
    resume, advance, jump_to_prophecy).
    """

    def __init__(
        self,
        clock: RealmClock,
        host: str = "0.0.0.0",
        port: int = 8765,
        sync_interval: float = 1.0,
        max_history: int = 200,
    ) -> None:
        self._clock = clock
        self._host = host
        self._port = port
        self._sync_interval = sync_interval
        self._clients: set[ServerConnection] = set()
        self._server: Any = None
        self._sync_task: asyncio.Task | None = None
        self._command_handlers: dict[str, Any] = {}
        self._event_history: list[dict] = []
        self._max_history = max_history

    @property
    def name(self) -> str:
        return "websocket"

    @property
    def port(self) -> int:
        """Bound port (useful when constructed with port=0)."""
        if self._server is not None:
            return self._server.sockets[0].getsockname()[1]
        return self._port

    def set_command_handler(self, command: str, handler: Any) -> None:
        """Register an async handler for an extra client command."""
        self._command_handlers[command] = handler

    async def connect(self) -> None:
        """Start the WebSocket server."""
        self._server = await serve(
            self._handle_client,
            self._host,
            self._port,
        )
        self._sync_task = asyncio.create_task(self._broadcast_clock())
        logger.info(f"WebSocket server started on ws://{self._host}:{self.port}")

    async def disconnect(self) -> None:
        """Stop the WebSocket server."""
        if self._sync_task:
            self._sync_task.cancel()
            try:
                await self._sync_task
            except asyncio.CancelledError:
                pass
        if self._server:
            self._server.close()
            await self._server.wait_closed()
        logger.info("WebSocket server stopped")

    async def push_state(self, state: dict) -> None:
        """Broadcast calendar update to all connected clients."""
        await self._broadcast(json.dumps({"type": "state", "state": state}))

    async def push_event(self, event: dict) -> None:
        """Broadcast time-event notice to all connected clients."""
        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            self._event_history.pop(0)
        await self._broadcast(json.dumps({"type": "event", "event": event}))

    def _clock_message(self, msg_type: str) -> str:
        return json.dumps({
            "type": msg_type,
            "state": self._clock.get_state().to_dict(),
            "rate": self._clock.rate,
            "paused": self._clock.is_paused,
            "environment": self._clock.get_environment().to_dict(),
        })

    async def _handle_client(self, websocket: ServerConnection) -> None:
        """Handle a single client connection."""
        self._clients.add(websocket)
        logger.info(f"Client connected ({len(self._clients)} total)")

        try:
            await websocket.send(self._clock_message("snapshot"))

            # Replay notices so late joiners see what already happened
            for evt in self._event_history:
                await websocket.send(json.dumps({"type": "event", "event": evt}))

            async for message in websocket:
                await self._handle_message(message)

        except websockets.ConnectionClosed:
            pass
        finally:
            self._clients.discard(websocket)
            logger.info(f"Client disconnected ({len(self._clients)} total)")

    async def _handle_message(self, raw: str) -> None:
        """Process an incoming message from a client."""
        try:
            msg = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON from client: {raw[:100]}")
            return
        if not isinstance(msg, dict):
            logger.warning(f"Ignoring non-object message from client: {raw[:100]}")
            return

        # Support both { type: "..." } and { cmd: "..." } formats
        msg_type = msg.get("cmd") or msg.get("type")

        try:
            if msg_type == "set_rate":
                self._clock.set_rate(float(msg.get("rate", 1.0)))
                logger.info(f"Clock rate set to {self._clock.rate} min/s")
            elif msg_type == "pause":
                self._clock.pause()
                logger.info("Clock paused")
            elif msg_type == "resume":
                self._clock.resume()
                logger.info("Clock resumed")
            elif msg_type == "advance":
                minutes = float(msg.get("minutes", 0))
                self._clock.advance(minutes)
                logger.info(f"Clock advanced {minutes:g} minutes by client")
            elif msg_type == "jump_to_prophecy":
                advanced = self._clock.jump_to(PROPHECY_START)
                logger.info(f"Jumped {advanced:g} minutes to the prophecy")
            elif msg_type in self._command_handlers:
                await self._command_handlers[msg_type](msg)
                return
            else:
                logger.debug(f"Unknown message type: {msg_type}")
                return
        except (TypeError, ValueError) as e:
            logger.warning(f"Rejected '{msg_type}' command: {e}")
            return

        await self._broadcast(self._clock_message("clock"))

    async def _broadcast(self, message: str) -> None:
        """Send a message to all connected clients."""
        if not self._clients:
            return
        disconnected = set()
        for client in list(self._clients):
            try:
                await client.send(message)
            except websockets.ConnectionClosed:
                disconnected.add(client)
        self._clients -= disconnected

    async def _broadcast_clock(self) -> None:
        """Periodically broadcast clock state to all clients."""
        while True:
            try:
                await self._broadcast(self._clock_message("clock"))
                await asyncio.sleep(self._sync_interval)
            except asyncio.CancelledError:
                break

    @property
    def client_count(self) -> int:
        """Number of connected clients."""
        return len(self._clients)
