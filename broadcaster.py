import asyncio
from typing import Optional, Set

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from backend import RoomRegistry, room_registry
from constants import BROADCAST_SEND_TIMEOUT
from logging_config import get_logger
from snapshot import encode_room_list

logger = get_logger(__name__)


class RoomBroadcaster:
    """Pushes the public room list to every connected lobby subscriber.

    Mutating code calls notify(), which only flags that the list changed.
    A background task started with start() drains the flag and fans the
    latest snapshot out, so several notifications in a row collapse into a
    single push and the mutator never waits on a socket.
    """

    def __init__(self, registry: RoomRegistry, send_timeout: float = BROADCAST_SEND_TIMEOUT):
        self.registry = registry
        self.send_timeout = send_timeout
        self._subscribers: Set[WebSocket] = set()
        self._wakeup: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        # created here so the event belongs to the running loop
        self._wakeup = asyncio.Event()
        self._task = asyncio.create_task(self._fan_out_loop())
        logger.info("Room list broadcaster started")

    async def stop(self):
        task, self._task = self._task, None
        self._wakeup = None
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._subscribers.clear()
        logger.info("Room list broadcaster stopped")

    def notify(self):
        """Request a broadcast of the current room list."""
        if self._wakeup is None:
            logger.debug("Broadcaster not running, dropping notification")
            return
        self._wakeup.set()

    async def subscribe(self, websocket: WebSocket):
        """Register a lobby connection and send it the current list."""
        self._subscribers.add(websocket)
        logger.info(f"Subscriber added (total: {len(self._subscribers)})")
        await self._send(websocket, encode_room_list(self.registry.list_all()))

    def unsubscribe(self, websocket: WebSocket):
        if websocket in self._subscribers:
            self._subscribers.discard(websocket)
            logger.info(f"Subscriber removed (total: {len(self._subscribers)})")

    async def broadcast(self) -> int:
        """Send the current list to every open subscriber. Returns how many were targeted."""
        payload = encode_room_list(self.registry.list_all())
        targets = [
            ws for ws in list(self._subscribers)
            if ws.application_state == WebSocketState.CONNECTED
        ]
        logger.debug(f"Broadcasting room list to {len(targets)} subscribers")
        if targets:
            await asyncio.gather(*(self._send(ws, payload) for ws in targets))
        return len(targets)

    async def _send(self, websocket: WebSocket, payload: str):
        try:
            await asyncio.wait_for(websocket.send_text(payload), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Subscriber send timed out after {self.send_timeout}s")
        except Exception as e:
            # Subscribers leave only through unsubscribe(); a failed send just skips them
            logger.warning(f"Error sending room list to subscriber: {e}")

    async def _fan_out_loop(self):
        wakeup = self._wakeup
        while True:
            await wakeup.wait()
            wakeup.clear()
            try:
                await self.broadcast()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Room list broadcast failed: {e}", exc_info=True)


broadcaster = RoomBroadcaster(room_registry)
