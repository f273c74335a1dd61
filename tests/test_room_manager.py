"""
Tests for room creation and the leave/abandonment behaviour.
"""
import pytest

from core.models import Status
from core.room_manager import CONNECTED_NOTICE, PARTNER_LEFT_NOTICE, RoomManager
from core.session_registry import SessionRegistry

from conftest import make_profile


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def rooms(registry, notifier):
    return RoomManager(registry, notifier)


def test_pair_maps_both_members(registry, rooms, notifier):
    a = registry.register("a")
    b = registry.register("b")

    room = rooms.pair(a, b)

    assert room.members == ("a", "b")
    assert a.room_id == room.id
    assert b.room_id == room.id
    assert rooms.current_room("a") is room
    assert rooms.current_room("b") is room
    assert notifier.statuses("a") == [(Status.IN_CHAT, room.id)]
    assert notifier.statuses("b") == [(Status.IN_CHAT, room.id)]


def test_room_ids_are_never_reused(registry, rooms):
    a = registry.register("a")
    b = registry.register("b")
    first = rooms.pair(a, b)
    rooms.leave("a")
    rooms.leave("b")
    second = rooms.pair(a, b)
    assert first.id != second.id


def test_pair_notice_without_common_interests(registry, rooms, notifier):
    a = registry.register("a", make_profile(interests=["music"]))
    b = registry.register("b", make_profile(interests=["chess"]))
    rooms.pair(a, b)
    assert notifier.notices("a") == [CONNECTED_NOTICE]
    assert notifier.notices("b") == [CONNECTED_NOTICE]


def test_pair_notice_lists_common_interests(registry, rooms, notifier):
    a = registry.register("a", make_profile(interests=["music", "art", "film"]))
    b = registry.register("b", make_profile(interests=["film", "music"]))
    rooms.pair(a, b)
    expected = f"{CONNECTED_NOTICE} You both like: music, film"
    assert notifier.notices("a") == [expected]
    assert notifier.notices("b") == [expected]


def test_leave_without_room_is_noop(registry, rooms, notifier):
    registry.register("a")
    assert rooms.leave("a") is None
    assert rooms.leave("unknown") is None
    assert notifier.events == []


def test_leave_clears_only_the_leaver(registry, rooms, notifier):
    a = registry.register("a")
    b = registry.register("b")
    room = rooms.pair(a, b)
    notifier.clear()

    assert rooms.leave("a") is room

    assert a.room_id is None
    assert b.room_id == room.id
    assert rooms.current_room("b") is room
    assert notifier.statuses("b") == [(Status.PARTNER_DISCONNECTED, None)]
    assert notifier.notices("b") == [PARTNER_LEFT_NOTICE]
    assert notifier.of_kind("status", "a") == []


def test_abandoned_room_has_no_partner(registry, rooms):
    a = registry.register("a")
    b = registry.register("b")
    rooms.pair(a, b)
    rooms.leave("a")
    assert rooms.partner_of("b") is None


def test_partner_that_moved_on_is_not_notified(registry, rooms, notifier):
    a = registry.register("a")
    b = registry.register("b")
    c = registry.register("c")
    rooms.pair(a, b)
    rooms.leave("a")
    rooms.pair(a, c)
    notifier.clear()

    # b leaves the abandoned room; a is busy with c and hears nothing
    rooms.leave("b")

    assert notifier.events == []
    assert b.room_id is None
    assert a.room_id is not None


def test_room_is_dropped_once_nobody_maps_to_it(registry, rooms):
    a = registry.register("a")
    b = registry.register("b")
    rooms.pair(a, b)
    assert rooms.room_count == 1
    rooms.leave("a")
    assert rooms.room_count == 1
    rooms.leave("b")
    assert rooms.room_count == 0


def test_unregistered_partner_is_not_notified(registry, rooms, notifier):
    a = registry.register("a")
    b = registry.register("b")
    rooms.pair(a, b)
    registry.unregister("b")
    notifier.clear()

    rooms.leave("a")

    assert notifier.events == []
    assert rooms.room_count == 0
