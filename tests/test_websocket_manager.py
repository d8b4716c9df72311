"""Tests for the connection registry."""

from datetime import datetime, timedelta, timezone

import pytest

from conftest import FakeWebSocket
from tvqueue.schemas.websocket import ConnectedDevice, PlaybackStateMessage


def device(name: str, minutes_ago: int = 0) -> ConnectedDevice:
    joined_at = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    return ConnectedDevice(name=name, type="mobile", joined_at=joined_at.isoformat())


# Test: membership

def test_join_and_leave(registry):
    websocket = FakeWebSocket()

    registry.join("room-1", websocket)

    assert registry.room_of(websocket) == "room-1"
    assert registry.get_room_connection_count("room-1") == 1

    assert registry.leave(websocket) == ("room-1", None)
    assert registry.room_of(websocket) is None
    assert "room-1" not in registry.active_connections


def test_leave_unknown_connection(registry):
    assert registry.leave(FakeWebSocket()) == (None, None)


def test_join_twice_keeps_one_membership(registry):
    websocket = FakeWebSocket()

    registry.join("room-1", websocket)
    registry.join("room-1", websocket)

    assert registry.get_room_connection_count("room-1") == 1


def test_join_other_room_moves_connection(registry):
    websocket = FakeWebSocket()
    registry.join("room-1", websocket, device("TV"))

    registry.join("room-2", websocket)

    assert registry.room_of(websocket) == "room-2"
    assert "room-1" not in registry.active_connections
    assert registry.get_devices("room-2") == []
    assert registry.all_connections() == [websocket]


def test_devices_are_listed_oldest_first(registry):
    newer, older = FakeWebSocket(), FakeWebSocket()
    registry.join("room-1", newer, device("Phone", minutes_ago=1))
    registry.join("room-1", older, device("TV", minutes_ago=5))
    registry.join("room-1", FakeWebSocket())
    registry.join("room-2", FakeWebSocket(), device("Elsewhere"))

    assert [d.name for d in registry.get_devices("room-1")] == ["TV", "Phone"]

    _, left = registry.leave(older)
    assert left.name == "TV"
    assert [d.name for d in registry.get_devices("room-1")] == ["Phone"]


# Test: delivery

@pytest.mark.anyio
async def test_broadcast_reaches_only_room_members(registry):
    first, second, outsider = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
    registry.join("room-1", first)
    registry.join("room-1", second)
    registry.join("room-2", outsider)

    await registry.broadcast("room-1", PlaybackStateMessage(is_playing=True))

    expected = [{"type": "playback_state", "isPlaying": True}]
    assert first.messages == expected
    assert second.messages == expected
    assert outsider.sent == []


@pytest.mark.anyio
async def test_broadcast_skips_excluded_connection(registry):
    sender, peer = FakeWebSocket(), FakeWebSocket()
    registry.join("room-1", sender)
    registry.join("room-1", peer)

    await registry.broadcast("room-1", PlaybackStateMessage(is_playing=False), exclude=sender)

    assert sender.sent == []
    assert peer.types() == ["playback_state"]


@pytest.mark.anyio
async def test_broadcast_to_empty_room_is_noop(registry):
    await registry.broadcast("nobody-here", PlaybackStateMessage(is_playing=True))


@pytest.mark.anyio
async def test_broadcast_skips_closed_connections(registry):
    closed, open_ = FakeWebSocket(), FakeWebSocket()
    registry.join("room-1", closed)
    registry.join("room-1", open_)
    await closed.close()

    await registry.broadcast("room-1", PlaybackStateMessage(is_playing=True))

    assert closed.sent == []
    assert open_.types() == ["playback_state"]


@pytest.mark.anyio
async def test_failed_send_stops_delivery_but_keeps_device(registry):
    broken, healthy = FakeWebSocket(fail_on_send=True), FakeWebSocket()
    registry.join("room-1", broken, device("Phone"))
    registry.join("room-1", healthy)

    await registry.broadcast("room-1", PlaybackStateMessage(is_playing=True))
    broken.fail_on_send = False
    await registry.broadcast("room-1", PlaybackStateMessage(is_playing=False))

    assert healthy.types() == ["playback_state", "playback_state"]
    assert broken.sent == []
    assert registry.get_room_connection_count("room-1") == 1
    # Room and device stay known until the disconnect is handled
    assert registry.room_of(broken) == "room-1"
    assert registry.leave(broken)[1].name == "Phone"


@pytest.mark.anyio
async def test_failed_send_of_last_connection_drops_room_entry(registry):
    broken = FakeWebSocket(fail_on_send=True)
    registry.join("room-1", broken)

    await registry.broadcast("room-1", PlaybackStateMessage(is_playing=True))

    assert "room-1" not in registry.active_connections
    assert registry.leave(broken) == ("room-1", None)


@pytest.mark.anyio
async def test_personal_message_failure_is_contained(registry):
    broken = FakeWebSocket(fail_on_send=True)

    await registry.send_personal_message(broken, PlaybackStateMessage(is_playing=True))

    assert broken.sent == []


@pytest.mark.anyio
async def test_personal_message_to_closed_connection_is_skipped(registry):
    websocket = FakeWebSocket()
    await websocket.close()

    await registry.send_personal_message(websocket, PlaybackStateMessage(is_playing=True))

    assert websocket.sent == []
