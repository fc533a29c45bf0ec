from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from events import EventRouter
from presence import PresenceRegistry


@dataclass
class Emission:
    event: str
    data: Any
    to: Optional[str]
    recipients: List[str]


@dataclass
class FakeTransport:
    """Records what the router sends, with socket.io style groups."""

    connected: List[str] = field(default_factory=list)
    rooms: Dict[str, set] = field(default_factory=dict)  # room -> set of sids
    emitted: List[Emission] = field(default_factory=list)

    async def enter_room(self, sid: str, room: str):
        self.rooms.setdefault(room, set()).add(sid)

    async def leave_room(self, sid: str, room: str):
        self.rooms.get(room, set()).discard(sid)

    async def emit(self, event: str, data: Any = None, to: Optional[str] = None):
        if to is None:
            recipients = list(self.connected)
        else:
            recipients = sorted(self.rooms.get(to, set()))
        self.emitted.append(Emission(event=event, data=data, to=to, recipients=recipients))

    def events(self, event: str, to: Optional[str] = "*") -> List[Emission]:
        """Emissions of one event; ``to="*"`` matches any target, ``None`` only global ones."""
        return [e for e in self.emitted if e.event == event and (to == "*" or e.to == to)]

    def received_by(self, sid: str, event: str) -> List[Any]:
        return [e.data for e in self.emitted if e.event == event and sid in e.recipients]

    def clear(self):
        self.emitted.clear()


@pytest.fixture
def registry():
    return PresenceRegistry()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def router(registry, transport):
    return EventRouter(registry, transport)


@pytest.fixture
def connect(router, transport):
    async def _connect(sid: str):
        transport.connected.append(sid)
        await router.handle("connect", sid, {}, None)
    return _connect


@pytest.fixture
def disconnect(router, transport):
    async def _disconnect(sid: str):
        # socket.io drops the socket from its groups before anyone else sees it
        transport.connected.remove(sid)
        for members in transport.rooms.values():
            members.discard(sid)
        await router.handle("disconnect", sid, "client disconnect")
    return _disconnect
