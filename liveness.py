import asyncio
from typing import List, Optional

from backend import RoomRegistry, room_registry
from broadcaster import RoomBroadcaster, broadcaster
from constants import CLEANUP_INTERVAL, HEARTBEAT_TIMEOUT
from logging_config import get_logger

logger = get_logger(__name__)


class LivenessMonitor:
    """Periodically evicts rooms that stopped sending heartbeats."""

    def __init__(
        self,
        registry: RoomRegistry,
        broadcaster: RoomBroadcaster,
        interval: float = CLEANUP_INTERVAL,
        timeout: float = HEARTBEAT_TIMEOUT,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.interval = interval
        self.timeout = timeout
        self._task: Optional[asyncio.Task] = None

    def sweep(self, now: Optional[float] = None) -> List[str]:
        """Run one eviction pass; broadcasts only if something was removed."""
        removed = self.registry.evict_stale(self.timeout, now=now)
        if removed:
            logger.info(f"Liveness sweep removed {len(removed)} stale rooms: {removed}")
            self.broadcaster.notify()
        return removed

    def start(self):
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
            logger.info(f"Liveness monitor started: interval={self.interval}s, timeout={self.timeout}s")

    async def stop(self):
        task, self._task = self._task, None
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            logger.info("Liveness monitor stopped")

    async def _run(self):
        # one sweep per tick, never two at once
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Liveness sweep failed: {e}", exc_info=True)


liveness_monitor = LivenessMonitor(room_registry, broadcaster)
