import pytest

from errors import NotFoundError, ValidationError


def test_upsert_applies_defaults(registry, clock):
    room = registry.upsert("r1")

    assert room.name == "r1"
    assert room.is_public is True
    assert room.max_players == 4
    assert room.players == 1
    assert room.mode == "P2P"
    assert room.host_peer_id == ""
    assert room.last_heartbeat == clock.now
    assert room.offer is None and room.answer is None
    assert room.ice_candidates == []


def test_upsert_keeps_supplied_fields(registry):
    room = registry.upsert(
        "r1", name="Friday game", is_public=False, join_code="XYZ",
        max_players=2, players=0, mode="LAN", host_peer_id="peer-1",
    )

    assert room.name == "Friday game"
    assert room.is_public is False
    assert room.join_code == "XYZ"
    assert room.max_players == 2
    assert room.players == 0
    assert room.mode == "LAN"
    assert room.host_peer_id == "peer-1"


def test_upsert_falls_back_on_out_of_range_counts(registry):
    room = registry.upsert("r1", max_players=0, players=-3)

    assert room.max_players == 4
    assert room.players == 1


def test_players_above_max_is_accepted(registry):
    room = registry.upsert("r1", max_players=2, players=5)

    assert room.players == 5


@pytest.mark.parametrize("room_id", [None, ""])
def test_upsert_requires_room_id(registry, room_id):
    with pytest.raises(ValidationError):
        registry.upsert(room_id, name="nameless")

    assert registry.list_all() == []


def test_upsert_overwrites_existing_room(registry):
    registry.upsert("r1", name="first")
    registry.set_offer("r1", {"sdp": "v=0"})
    registry.upsert("r1", name="second")

    rooms = registry.list_all()
    assert len(rooms) == 1
    assert rooms[0].name == "second"
    assert rooms[0].offer is None


def test_get_returns_copy(registry):
    registry.upsert("r1", players=1)

    room = registry.get("r1")
    room.players = 99
    room.ice_candidates.append("leak")

    stored = registry.get("r1")
    assert stored.players == 1
    assert stored.ice_candidates == []


def test_get_unknown_room(registry):
    assert registry.get("missing") is None


def test_heartbeat_updates_players_and_timestamp(registry, clock):
    registry.upsert("r1")
    clock.advance(12)

    room = registry.heartbeat("r1", players=3)

    assert room.players == 3
    assert room.last_heartbeat == clock.now


@pytest.mark.parametrize("players", [None, -1, True, "3", 2.5])
def test_heartbeat_ignores_invalid_players(registry, clock, players):
    registry.upsert("r1", players=2)
    clock.advance(5)

    room = registry.heartbeat("r1", players=players)

    assert room.players == 2
    assert room.last_heartbeat == clock.now


def test_heartbeat_unknown_room(registry):
    registry.upsert("r1")
    before = registry.list_all()

    with pytest.raises(NotFoundError):
        registry.heartbeat("nope", players=2)

    assert registry.list_all() == before


def test_remove_is_idempotent(registry):
    registry.upsert("r1")

    assert registry.remove("r1") is True
    assert registry.remove("r1") is False
    assert registry.get("r1") is None
    assert len(registry) == 0


def test_relay_writes_require_existing_room(registry):
    with pytest.raises(NotFoundError):
        registry.set_offer("ghost", {"sdp": "x"})
    with pytest.raises(NotFoundError):
        registry.set_answer("ghost", {"sdp": "x"})
    with pytest.raises(NotFoundError):
        registry.append_ice_candidate("ghost", {"candidate": "x"})
    with pytest.raises(NotFoundError):
        registry.get_signaling("ghost")

    assert registry.list_all() == []


def test_offer_and_answer_are_last_write_wins(registry):
    registry.upsert("r1")

    registry.set_offer("r1", {"sdp": "offer-1"})
    registry.set_offer("r1", {"sdp": "offer-2"})
    registry.set_answer("r1", "raw answer blob")

    signaling = registry.get_signaling("r1")
    assert signaling["offer"] == {"sdp": "offer-2"}
    assert signaling["answer"] == "raw answer blob"


def test_ice_candidates_append_in_order(registry):
    registry.upsert("r1")

    assert registry.append_ice_candidate("r1", {"candidate": "a"}) == 1
    assert registry.append_ice_candidate("r1", {"candidate": "a"}) == 2
    assert registry.append_ice_candidate("r1", {"candidate": "b"}) == 3

    assert registry.get_signaling("r1")["ice_candidates"] == [
        {"candidate": "a"}, {"candidate": "a"}, {"candidate": "b"},
    ]


def test_relay_leaves_room_fields_alone(registry, clock):
    registry.upsert("r1", max_players=2, players=1)
    clock.advance(3)

    registry.set_offer("r1", {"sdp": "x"})
    registry.append_ice_candidate("r1", {"candidate": "1"})
    registry.append_ice_candidate("r1", {"candidate": "2"})

    room = registry.get("r1")
    assert room.players == 1
    assert room.max_players == 2
    assert room.last_heartbeat == clock.now - 3


def test_stored_payload_is_isolated_from_caller(registry):
    registry.upsert("r1")
    payload = {"sdp": "v=0", "meta": {"type": "offer"}}

    registry.set_offer("r1", payload)
    payload["meta"]["type"] = "tampered"

    assert registry.get_signaling("r1")["offer"]["meta"]["type"] == "offer"


def test_evict_stale_boundary(registry, clock):
    timeout = 30
    registry.upsert("old")
    clock.advance(2)
    registry.upsert("fresh")
    clock.advance(timeout - 1)  # old: timeout + 1, fresh: timeout - 1

    removed = registry.evict_stale(timeout)

    assert removed == ["old"]
    assert [room.room_id for room in registry.list_all()] == ["fresh"]


def test_evict_stale_keeps_room_exactly_at_timeout(registry, clock):
    registry.upsert("r1")
    clock.advance(30)

    assert registry.evict_stale(30) == []
    assert registry.get("r1") is not None


def test_heartbeat_saves_room_from_eviction(registry, clock):
    registry.upsert("r1")
    clock.advance(25)
    registry.heartbeat("r1")
    clock.advance(25)

    assert registry.evict_stale(30) == []
