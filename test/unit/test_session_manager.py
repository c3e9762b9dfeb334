"""Tests for connection session lifecycle: connect, join, leave, disconnect."""

import pytest

from watchparty.connection.socketio_broadcaster import ROOM_STATE, USER_JOINED, USER_LEFT
from watchparty.models.connection_session import SessionState

pytestmark = pytest.mark.asyncio


def member_ids(registry, room_id):
    room = registry.get(room_id)
    return set(room.participants) if room else set()


class TestJoin:

    async def test_first_join_creates_room_and_sends_snapshot(self, session_manager, registry, fake_sio):
        session_manager.connect("sid-a")

        await session_manager.join("sid-a", "movie-night", "Alice")

        assert member_ids(registry, "movie-night") == {"sid-a"}
        state = fake_sio.events_for("sid-a", ROOM_STATE)
        assert len(state) == 1
        assert state[0]["data"]["participants"] == [{"name": "Alice", "socketId": "sid-a"}]
        assert state[0]["data"]["videoState"]["isPlaying"] is False
        assert state[0]["data"]["videoState"]["currentTime"] == 0

    async def test_second_joiner_reuses_room_and_notifies_others(self, session_manager, registry, fake_sio):
        session_manager.connect("sid-a")
        session_manager.connect("sid-b")
        await session_manager.join("sid-a", "movie-night", "Alice")
        room = registry.get("movie-night")

        await session_manager.join("sid-b", "movie-night", "Bob")

        assert registry.get("movie-night") is room
        assert len(registry) == 1
        expected = [{"name": "Alice", "socketId": "sid-a"}, {"name": "Bob", "socketId": "sid-b"}]
        joined = fake_sio.events_for("sid-a", USER_JOINED)
        assert joined[-1]["data"] == {"userName": "Bob", "participants": expected}
        assert fake_sio.events_for("sid-b", USER_JOINED) == []

    async def test_session_tracks_room_and_name(self, session_manager):
        session_manager.connect("sid-a")

        await session_manager.join("sid-a", "movie-night", "Alice")

        session = session_manager.get_session("sid-a")
        assert session.state is SessionState.IN_ROOM
        assert session.current_room_id == "movie-night"
        assert session.display_name == "Alice"

    async def test_join_without_session_is_dropped(self, session_manager, registry, fake_sio):
        result = await session_manager.join("sid-x", "late", "Xavier")

        assert result is None
        assert session_manager.get_session("sid-x") is None
        assert "late" not in registry
        assert fake_sio.emitted == []

    async def test_join_after_disconnect_is_dropped(self, session_manager, registry):
        session_manager.connect("sid-a")
        await session_manager.disconnect("sid-a")

        await session_manager.join("sid-a", "movie-night", "Alice")

        assert session_manager.connection_count == 0
        assert len(registry) == 0

    async def test_switching_rooms_leaves_previous_room(self, session_manager, registry, fake_sio):
        for sid in ("sid-a", "sid-b"):
            session_manager.connect(sid)
        await session_manager.join("sid-a", "room-a", "Alice")
        await session_manager.join("sid-b", "room-a", "Bob")

        await session_manager.join("sid-a", "room-b", "Alice")

        assert member_ids(registry, "room-a") == {"sid-b"}
        assert member_ids(registry, "room-b") == {"sid-a"}
        left = fake_sio.events_for("sid-b", USER_LEFT)
        assert left[-1]["data"]["participants"] == [{"name": "Bob", "socketId": "sid-b"}]

    async def test_switching_out_of_solo_room_deletes_it(self, session_manager, registry):
        session_manager.connect("sid-a")
        await session_manager.join("sid-a", "room-a", "Alice")

        await session_manager.join("sid-a", "room-b", "Alice")

        assert registry.get("room-a") is None
        assert member_ids(registry, "room-b") == {"sid-a"}

    async def test_rejoining_same_room_does_not_duplicate(self, session_manager, registry):
        session_manager.connect("sid-a")
        await session_manager.join("sid-a", "room-a", "Alice")

        await session_manager.join("sid-a", "room-a", "Alicia")

        room = registry.get("room-a")
        assert list(room.participants) == ["sid-a"]
        assert room.participants["sid-a"].display_name == "Alicia"


class TestLeaveAndDisconnect:

    async def test_disconnect_notifies_remaining_members(self, session_manager, fake_sio):
        for sid, name in (("sid-a", "Alice"), ("sid-b", "Bob")):
            session_manager.connect(sid)
            await session_manager.join(sid, "movie-night", name)
        fake_sio.clear()

        await session_manager.disconnect("sid-b")

        left = fake_sio.events_for("sid-a", USER_LEFT)
        assert left == [{
            "event": USER_LEFT,
            "data": {"userName": "Bob", "participants": [{"name": "Alice", "socketId": "sid-a"}]},
            "to": "sid-a",
        }]
        assert fake_sio.events_for("sid-b") == []

    async def test_last_disconnect_removes_room(self, session_manager, registry, fake_sio):
        session_manager.connect("sid-a")
        await session_manager.join("sid-a", "movie-night", "Alice")
        fake_sio.clear()

        await session_manager.disconnect("sid-a")

        assert "movie-night" not in registry
        assert fake_sio.emitted == []
        assert session_manager.get_session("sid-a") is None

    async def test_double_disconnect_is_harmless(self, session_manager, registry):
        session_manager.connect("sid-a")
        await session_manager.join("sid-a", "movie-night", "Alice")

        await session_manager.disconnect("sid-a")
        await session_manager.disconnect("sid-a")

        assert len(registry) == 0

    async def test_disconnect_of_unknown_connection_is_noop(self, session_manager):
        await session_manager.disconnect("never-connected")

        assert session_manager.connection_count == 0

    async def test_disconnect_without_room(self, session_manager, registry):
        session_manager.connect("sid-a")

        await session_manager.disconnect("sid-a")

        assert session_manager.connection_count == 0
        assert len(registry) == 0

    async def test_leave_detaches_transport_room(self, session_manager, fake_sio):
        session_manager.connect("sid-a")
        await session_manager.join("sid-a", "movie-night", "Alice")
        assert fake_sio.rooms["movie-night"] == {"sid-a"}

        await session_manager.leave("sid-a")

        assert fake_sio.rooms["movie-night"] == set()
        assert session_manager.get_session("sid-a").state is SessionState.CONNECTED

    async def test_leave_detaches_transport_room_when_room_already_gone(self, session_manager, registry, fake_sio):
        session_manager.connect("sid-a")
        await session_manager.join("sid-a", "movie-night", "Alice")
        registry.remove("movie-night")

        await session_manager.leave("sid-a")

        assert fake_sio.rooms["movie-night"] == set()
        assert session_manager.get_session("sid-a").current_room_id is None

    async def test_membership_matches_joins_minus_departures(self, session_manager, registry):
        sids = [f"sid-{i}" for i in range(6)]
        for sid in sids:
            session_manager.connect(sid)
            await session_manager.join(sid, "big-room", sid.upper())

        await session_manager.disconnect("sid-1")
        await session_manager.join("sid-3", "other-room", "SID-3")
        await session_manager.leave("sid-5")
        await session_manager.disconnect("sid-1")

        assert member_ids(registry, "big-room") == {"sid-0", "sid-2", "sid-4"}
        assert member_ids(registry, "other-room") == {"sid-3"}


class TestVideoAction:

    async def test_uses_current_room_when_none_given(self, session_manager, registry):
        for sid, name in (("sid-a", "Alice"), ("sid-b", "Bob")):
            session_manager.connect(sid)
            await session_manager.join(sid, "movie-night", name)

        applied = await session_manager.video_action("sid-a", "seek", 33.0)

        assert applied is True
        assert registry.get("movie-night").playback_state.current_time == 33.0

    async def test_without_any_room_is_dropped(self, session_manager, fake_sio):
        session_manager.connect("sid-a")

        assert await session_manager.video_action("sid-a", "play", 1.0) is False
        assert fake_sio.emitted == []
