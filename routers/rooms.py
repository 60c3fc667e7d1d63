from fastapi import APIRouter, Body, Request, Response, status
from schemas.rooms import RegisterRoomRequest, HeartbeatRequest, RoomSnapshot, SignalingResponse
from backend import room_registry
from broadcaster import broadcaster
from snapshot import serialize_rooms
from typing import Any, Optional
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


def _client(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@rooms_router.post("", status_code=status.HTTP_204_NO_CONTENT)
async def register_room(room: RegisterRoomRequest, request: Request):
    # Body: { "roomId": "abc", "name": "...", "isPublic": true, "maxPlayers": 4, ... }
    # Same roomId again replaces the previous entry.
    logger.info(f"Register room request from {_client(request)}: roomId={room.room_id}")
    room_registry.upsert(**room.model_dump())
    broadcaster.notify()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@rooms_router.get("", response_model=list[RoomSnapshot], response_model_by_alias=True)
async def list_rooms():
    rooms = serialize_rooms(room_registry.list_all())
    logger.debug(f"Listing {len(rooms)} rooms")
    return rooms


@rooms_router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(room_id: str, request: Request):
    logger.info(f"Delete room request for {room_id} from {_client(request)}")
    if room_registry.remove(room_id):
        broadcaster.notify()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@rooms_router.post("/{room_id}/heartbeat", status_code=status.HTTP_204_NO_CONTENT)
async def heartbeat_room(room_id: str, heartbeat: Optional[HeartbeatRequest] = None):
    # Body: { "players": 2 }, optional
    players = heartbeat.players if heartbeat else None
    room_registry.heartbeat(room_id, players)
    broadcaster.notify()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Signaling mailbox. These writes don't change the lobby view, so no broadcast.

@rooms_router.post("/{room_id}/offer", status_code=status.HTTP_204_NO_CONTENT)
async def post_offer(room_id: str, payload: Any = Body(...)):
    room_registry.set_offer(room_id, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@rooms_router.post("/{room_id}/answer", status_code=status.HTTP_204_NO_CONTENT)
async def post_answer(room_id: str, payload: Any = Body(...)):
    room_registry.set_answer(room_id, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@rooms_router.post("/{room_id}/ice", status_code=status.HTTP_204_NO_CONTENT)
async def post_ice_candidate(room_id: str, payload: Any = Body(...)):
    room_registry.append_ice_candidate(room_id, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@rooms_router.get("/{room_id}/signaling", response_model=SignalingResponse, response_model_by_alias=True)
async def get_signaling(room_id: str):
    """Offer, answer and ICE candidates posted so far for one room."""
    signaling = room_registry.get_signaling(room_id)
    return SignalingResponse(room_id=room_id, **signaling)
