import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from event_names import EVENT_CHAT_MESSAGE, EVENT_JOIN_ROOM, EVENT_LEAVE_ROOM, EVENT_USERS_ONLINE
from presence import PresenceRegistry
from schemas.presence import ChatMessage, ChatMessagePayload, ObjectIdentity, OnlineUser
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ConnectionState:
    room: Optional[str] = None
    user_id: Optional[str] = None


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    # Same text a browser client would produce for these
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def normalize_room(room_raw: Any) -> str:
    return to_text(room_raw).strip()


def resolve_identity(identity: Any, connection_id: str) -> str:
    """Pick the userId announced with joinRoom.

    Accepted shapes, in order:
    - None: no identity
    - a string: used as is
    - a mapping: first non-null of ``uid``, ``userId``, ``id``
    - a list: carries no identity fields
    - anything else: its text form, unless it is falsy (0, False)

    Whatever resolves to an empty string falls back to the connection id.
    """
    if identity is None:
        user_id = ""
    elif isinstance(identity, str):
        user_id = identity
    elif isinstance(identity, dict):
        fields = ObjectIdentity.model_validate(identity)
        chosen = next((v for v in (fields.uid, fields.userId, fields.id) if v is not None), None)
        user_id = to_text(chosen)
    elif isinstance(identity, (list, tuple)):
        user_id = ""
    else:
        user_id = to_text(identity) if identity else ""
    return user_id or connection_id


def dump_users(users: List[OnlineUser]) -> List[dict]:
    return [user.model_dump() for user in users]


class EventRouter:
    """Translates socket.io events into presence changes and broadcasts.

    ``transport`` is a socket.io ``AsyncServer`` or anything with the same
    ``enter_room``/``leave_room``/``emit`` coroutines. One asyncio lock
    serializes whole events so each room sees its broadcasts in mutation order.
    """

    def __init__(self, registry: PresenceRegistry, transport):
        self.registry = registry
        self.transport = transport
        # Format: {connection_id: ConnectionState}, created on connect, dropped on disconnect
        self.sessions: Dict[str, ConnectionState] = {}
        self._lock = asyncio.Lock()
        self._handlers = {
            "connect": self._guarded("connect", self.on_connect),
            "disconnect": self._guarded("disconnect", self.on_disconnect),
            EVENT_JOIN_ROOM: self._guarded(EVENT_JOIN_ROOM, self.on_join_room),
            EVENT_LEAVE_ROOM: self._guarded(EVENT_LEAVE_ROOM, self.on_leave_room),
            EVENT_CHAT_MESSAGE: self._guarded(EVENT_CHAT_MESSAGE, self.on_chat_message),
        }

    def register(self, sio):
        for event, handler in self._handlers.items():
            sio.on(event, handler)
        logger.debug(f"Registered socket.io handlers: {', '.join(self._handlers)}")

    async def handle(self, event: str, sid: str, *args):
        """Dispatch an event the way the transport would."""
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug(f"No handler for event {event} from {sid}")
            return
        await handler(sid, *args)

    def _guarded(self, event: str, handler):
        async def wrapper(sid, *args):
            try:
                async with self._lock:
                    await handler(sid, *args)
            except Exception as e:
                logger.error(f"Error handling {event} for connection {sid}: {e}", exc_info=True)
        return wrapper

    async def _broadcast_room(self, room: str, users: List[OnlineUser]):
        await self.transport.emit(EVENT_USERS_ONLINE, dump_users(users), to=room)
        logger.debug(f"Broadcasted {len(users)} members to room {room}")

    async def _broadcast_global(self, users: List[OnlineUser]):
        await self.transport.emit(EVENT_USERS_ONLINE, dump_users(users))

    async def _remove_from_room(self, sid: str, room: str, leave_group: bool = True) -> bool:
        if self.registry.lookup(room, sid) is None:
            return False
        if leave_group:
            await self.transport.leave_room(sid, room)
        remaining = self.registry.leave_room(room, sid)
        await self._broadcast_room(room, remaining)
        return True

    async def on_connect(self, sid, *_):
        self.sessions[sid] = ConnectionState()
        online = self.registry.add_global(sid)
        logger.info(f"A user connected with id: {sid}, total online: {len(online)}")
        await self._broadcast_global(online)

    async def on_join_room(self, sid, room_raw=None, identity=None, *_):
        room = normalize_room(room_raw)
        if not room:
            logger.debug(f"Ignoring joinRoom with blank room from {sid}")
            return

        state = self.sessions.get(sid)
        if state is None:
            logger.debug(f"Ignoring joinRoom from {sid}, connection is gone")
            return

        user_id = resolve_identity(identity, sid)

        # One room per connection: leave the previous one first
        if state.room and state.room != room:
            previous = state.room
            await self._remove_from_room(sid, previous)
            logger.info(f"Socket {sid} moved from room {previous} to {room}")

        await self.transport.enter_room(sid, room)
        members = self.registry.join_room(room, sid, user_id)
        state.room = room
        state.user_id = user_id
        logger.info(f"Socket {sid} joined room {room} as {user_id} ({len(members)} members)")

        await self._broadcast_room(room, members)

    async def on_leave_room(self, sid, room_raw=None, *_):
        room = normalize_room(room_raw)
        if not room:
            logger.debug(f"Ignoring leaveRoom with blank room from {sid}")
            return

        state = self.sessions.get(sid)
        if state is None:
            logger.debug(f"Ignoring leaveRoom from {sid}, connection is gone")
            return

        left = await self._remove_from_room(sid, room)

        if state.room == room:
            state.room = None
            state.user_id = None

        if left:
            logger.info(f"Socket {sid} left room {room}")
        else:
            logger.debug(f"Socket {sid} is not in room {room}, nothing to leave")

    async def on_chat_message(self, sid, payload=None, *_):
        state = self.sessions.get(sid)
        if state is None:
            logger.debug(f"Ignoring chat:message from {sid}, connection is gone")
            return
        if not isinstance(payload, dict):
            logger.debug(f"Ignoring chat:message with non-object payload from {sid}")
            return
        fields = ChatMessagePayload.model_validate(payload)

        text = to_text(fields.message).strip()
        if not text:
            return

        # Explicit room wins over the room the socket joined
        if fields.room is not None:
            room = normalize_room(fields.room)
        else:
            room = state.room
        if not room:
            logger.warning(f"chat:message received without room from {sid}, ignoring")
            return

        if fields.userId is not None:
            user_id = to_text(fields.userId)
        else:
            sender = self.registry.lookup(room, sid)
            user_id = sender.userId if sender is not None else sid

        outgoing = ChatMessage(
            userId=user_id,
            message=text,
            timestamp=fields.timestamp if fields.timestamp is not None else utc_now_iso(),
            clientId=fields.clientId,
        )
        await self.transport.emit(EVENT_CHAT_MESSAGE, outgoing.model_dump(exclude_none=True), to=room)
        logger.debug(f"Relayed chat message to room {room} from {user_id}")

    async def on_disconnect(self, sid, *_):
        state = self.sessions.pop(sid, None)

        online = self.registry.remove_global(sid)
        await self._broadcast_global(online)

        # The transport drops its groups on disconnect, only the registry needs updating
        if state is not None and state.room:
            await self._remove_from_room(sid, state.room, leave_group=False)

        logger.info(f"A user disconnected with id: {sid}, total online: {len(online)}")
