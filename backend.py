import copy
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from constants import DEFAULT_MAX_PLAYERS, DEFAULT_MODE, DEFAULT_PLAYERS
from errors import NotFoundError, ValidationError
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Room:
    room_id: str
    name: str
    is_public: bool = True
    join_code: Optional[str] = None
    max_players: int = DEFAULT_MAX_PLAYERS
    players: int = DEFAULT_PLAYERS
    mode: str = DEFAULT_MODE
    host_peer_id: str = ""
    last_heartbeat: float = 0.0
    # Signaling mailbox; payloads are opaque JSON values
    offer: Any = None
    answer: Any = None
    ice_candidates: List[Any] = field(default_factory=list)


def _is_count(value) -> bool:
    # bool is an int subclass; a heartbeat of `true` is not a player count
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class RoomRegistry:
    """In-memory room table plus the per-room signaling mailbox.

    Every mutation runs under one lock so upsert, heartbeat, remove, relay
    writes and the liveness eviction never interleave on the same room.
    Callers only ever receive copies of stored rooms.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._lock = threading.Lock()
        self._rooms: Dict[str, Room] = {}
        self._clock = clock
        logger.info("Initializing in-memory RoomRegistry")

    # ── Room entity store ────────────────────────────

    def upsert(
        self,
        room_id: Optional[str],
        name: Optional[str] = None,
        is_public: Optional[bool] = None,
        join_code: Optional[str] = None,
        max_players: Optional[int] = None,
        players: Optional[int] = None,
        mode: Optional[str] = None,
        host_peer_id: Optional[str] = None,
    ) -> Room:
        """Insert or replace a room, applying defaults and stamping the heartbeat.

        Re-registering an existing id overwrites it, signaling state included.
        """
        if not room_id or not isinstance(room_id, str):
            raise ValidationError("roomId is required")

        room = Room(
            room_id=room_id,
            name=name or room_id,
            is_public=is_public is not False,
            join_code=join_code,
            max_players=max_players if max_players and max_players > 0 else DEFAULT_MAX_PLAYERS,
            players=players if _is_count(players) else DEFAULT_PLAYERS,
            mode=mode or DEFAULT_MODE,
            host_peer_id=host_peer_id or "",
        )
        with self._lock:
            room.last_heartbeat = self._clock()
            replaced = room_id in self._rooms
            self._rooms[room_id] = room
            stored = copy.deepcopy(room)
        logger.info(
            f"Room {room_id} {'replaced' if replaced else 'registered'}: "
            f"name={room.name}, public={room.is_public}, players={room.players}/{room.max_players}"
        )
        return stored

    def get(self, room_id: str) -> Optional[Room]:
        with self._lock:
            room = self._rooms.get(room_id)
            return copy.deepcopy(room) if room else None

    def heartbeat(self, room_id: str, players: Any = None) -> Room:
        """Refresh a room's liveness and, when a valid count is given, its occupancy."""
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                logger.debug(f"Heartbeat for unknown room {room_id}")
                raise NotFoundError()
            if _is_count(players):
                room.players = players
            room.last_heartbeat = self._clock()
            stored = copy.deepcopy(room)
        logger.debug(f"Heartbeat for room {room_id}: players={stored.players}")
        return stored

    def remove(self, room_id: str) -> bool:
        """Drop a room if present. Returns whether anything was removed."""
        with self._lock:
            removed = self._rooms.pop(room_id, None) is not None
        if removed:
            logger.info(f"Room {room_id} deleted")
        else:
            logger.debug(f"Delete for unknown room {room_id} ignored")
        return removed

    def list_all(self) -> List[Room]:
        with self._lock:
            return [copy.deepcopy(room) for room in self._rooms.values()]

    def evict_stale(self, timeout: float, now: Optional[float] = None) -> List[str]:
        """Remove every room whose last heartbeat is older than `timeout` seconds.

        Selection and removal happen under a single lock acquisition, so a
        heartbeat either lands before the sweep (and saves the room) or after it
        (and gets NotFound).
        """
        with self._lock:
            if now is None:
                now = self._clock()
            stale = [
                room_id for room_id, room in self._rooms.items()
                if now - room.last_heartbeat > timeout
            ]
            for room_id in stale:
                del self._rooms[room_id]
        for room_id in stale:
            logger.info(f"Room {room_id} expired: no heartbeat for more than {timeout}s")
        return stale

    def clear(self):
        with self._lock:
            self._rooms.clear()
        logger.debug("RoomRegistry cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    # ── Signaling relay ──────────────────────────────

    def set_offer(self, room_id: str, payload: Any):
        with self._lock:
            self._require(room_id).offer = copy.deepcopy(payload)
        logger.info(f"Stored offer for room {room_id}")

    def set_answer(self, room_id: str, payload: Any):
        with self._lock:
            self._require(room_id).answer = copy.deepcopy(payload)
        logger.info(f"Stored answer for room {room_id}")

    def append_ice_candidate(self, room_id: str, payload: Any) -> int:
        """Append a candidate and return how many the room now holds."""
        with self._lock:
            room = self._require(room_id)
            room.ice_candidates.append(copy.deepcopy(payload))
            count = len(room.ice_candidates)
        logger.debug(f"Appended ICE candidate #{count} for room {room_id}")
        return count

    def get_signaling(self, room_id: str) -> dict:
        with self._lock:
            room = self._require(room_id)
            return {
                "offer": copy.deepcopy(room.offer),
                "answer": copy.deepcopy(room.answer),
                "ice_candidates": copy.deepcopy(room.ice_candidates),
            }

    def _require(self, room_id: str) -> Room:
        # caller holds the lock
        room = self._rooms.get(room_id)
        if room is None:
            logger.debug(f"Signaling request for unknown room {room_id}")
            raise NotFoundError()
        return room


room_registry = RoomRegistry()
