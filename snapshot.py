from typing import Iterable

from backend import Room
from schemas.rooms import RoomListMessage, RoomSnapshot


def to_snapshot(room: Room) -> RoomSnapshot:
    """Project a stored room into the public lobby view.

    The join code is only exposed for private rooms, and the signaling
    mailbox (offer, answer, ICE candidates) is never part of the view.
    """
    return RoomSnapshot(
        room_id=room.room_id,
        name=room.name or room.room_id,
        is_public=room.is_public,
        join_code=None if room.is_public else room.join_code,
        max_players=room.max_players,
        players=room.players,
        mode=room.mode,
        host_peer_id=room.host_peer_id,
        last_heartbeat=int(room.last_heartbeat * 1000),
    )


def serialize(room: Room) -> dict:
    return to_snapshot(room).model_dump(by_alias=True)


def serialize_rooms(rooms: Iterable[Room]) -> list[dict]:
    return [serialize(room) for room in rooms]


def encode_room_list(rooms: Iterable[Room]) -> str:
    """Wire message pushed to subscribers: {"rooms": [...]}."""
    message = RoomListMessage(rooms=[to_snapshot(room) for room in rooms])
    return message.model_dump_json(by_alias=True)
