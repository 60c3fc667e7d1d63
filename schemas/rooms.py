from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRoomRequest(CamelModel):
    # roomId is optional here so a missing id surfaces as the store's ValidationError
    room_id: Optional[str] = None
    name: Optional[str] = None
    is_public: Optional[bool] = None
    join_code: Optional[str] = None
    max_players: Optional[int] = None
    players: Optional[int] = None
    mode: Optional[str] = None
    host_peer_id: Optional[str] = None

class HeartbeatRequest(CamelModel):
    players: Any = None

class RoomSnapshot(CamelModel):
    room_id: str
    name: str
    is_public: bool
    join_code: Optional[str] = None
    max_players: int
    players: int
    mode: str
    host_peer_id: str
    last_heartbeat: int  # epoch milliseconds

class RoomListMessage(CamelModel):
    rooms: list[RoomSnapshot]

class SignalingResponse(CamelModel):
    room_id: str
    offer: Any = None
    answer: Any = None
    ice_candidates: list[Any] = []

class HealthResponse(BaseModel):
    status: str
    service: str
