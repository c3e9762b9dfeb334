"""Shared fixtures: a recording stand-in for the Socket.IO server."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

import pytest

from watchparty.connection.session_manager import SessionManager
from watchparty.connection.socketio_broadcaster import EventBroadcaster
from watchparty.connection.socketio_server import register_handlers
from watchparty.services.playback_synchronizer import PlaybackSynchronizer
from watchparty.services.room_registry import RoomRegistry


@dataclass
class FakeSocketServer:
    """Records emits and room membership the way AsyncServer would see them."""

    emitted: List[Dict[str, Any]] = field(default_factory=list)
    rooms: Dict[str, Set[str]] = field(default_factory=dict)
    handlers: Dict[str, Callable] = field(default_factory=dict)
    failing_sids: Set[str] = field(default_factory=set)

    async def emit(self, event: str, data: Any = None, to: Optional[str] = None, namespace: Optional[str] = None):
        if to in self.failing_sids:
            raise ConnectionError(f"socket {to} is gone")
        self.emitted.append({"event": event, "data": data, "to": to})

    async def enter_room(self, sid: str, room: str, namespace: Optional[str] = None):
        self.rooms.setdefault(room, set()).add(sid)

    async def leave_room(self, sid: str, room: str, namespace: Optional[str] = None):
        self.rooms.get(room, set()).discard(sid)

    def on(self, event: str, handler: Optional[Callable] = None, namespace: Optional[str] = None):
        def decorator(fn):
            self.handlers[event] = fn
            return fn
        return decorator

    def events_for(self, sid: str, event: Optional[str] = None) -> List[Dict[str, Any]]:
        """Events delivered to one connection, optionally filtered by name."""
        return [
            e for e in self.emitted
            if e["to"] == sid and (event is None or e["event"] == event)
        ]

    def clear(self):
        self.emitted.clear()


class YieldingSocketServer(FakeSocketServer):
    """Hands the event loop a turn after every transport call, like a real socket write."""

    async def emit(self, event: str, data: Any = None, to: Optional[str] = None, namespace: Optional[str] = None):
        await super().emit(event, data, to=to, namespace=namespace)
        await asyncio.sleep(0)

    async def enter_room(self, sid: str, room: str, namespace: Optional[str] = None):
        await super().enter_room(sid, room, namespace=namespace)
        await asyncio.sleep(0)

    async def leave_room(self, sid: str, room: str, namespace: Optional[str] = None):
        await super().leave_room(sid, room, namespace=namespace)
        await asyncio.sleep(0)


@pytest.fixture
def fake_sio():
    return FakeSocketServer()


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def broadcaster(fake_sio, registry):
    return EventBroadcaster(fake_sio, registry)


@pytest.fixture
def synchronizer(registry, broadcaster):
    return PlaybackSynchronizer(registry, broadcaster)


@pytest.fixture
def session_manager(registry, broadcaster, synchronizer):
    return SessionManager(registry, broadcaster, synchronizer)


@pytest.fixture
def wired_sio(fake_sio, session_manager):
    """Fake server with the real event handlers registered."""
    register_handlers(fake_sio, session_manager)
    return fake_sio


@pytest.fixture
def yielding_sio():
    return YieldingSocketServer()


@pytest.fixture
def yielding_manager(yielding_sio, registry):
    broadcaster = EventBroadcaster(yielding_sio, registry)
    return SessionManager(registry, broadcaster, PlaybackSynchronizer(registry, broadcaster))
