import threading
from typing import Dict, List, Optional

from schemas.presence import OnlineUser
from logging_config import get_logger

logger = get_logger(__name__)


class PresenceRegistry:
    """In-memory presence state for one server instance.

    Holds the global list of connected sockets and, per room, the members in
    join order. Every public method takes the lock and returns copies, so
    callers never hold a reference into the live lists.
    """

    def __init__(self):
        self._lock = threading.Lock()
        # Format: [OnlineUser(socketId, userId="")] in connect order
        self._online: List[OnlineUser] = []
        # Format: {room: [OnlineUser]} in join order; emptied rooms are kept
        self._rooms: Dict[str, List[OnlineUser]] = {}
        logger.debug("Initialized PresenceRegistry")

    def add_global(self, connection_id: str) -> List[OnlineUser]:
        with self._lock:
            self._online.append(OnlineUser(socketId=connection_id, userId=""))
            logger.debug(f"Added {connection_id} to global presence ({len(self._online)} online)")
            return list(self._online)

    def remove_global(self, connection_id: str) -> List[OnlineUser]:
        """Remove every global entry for the connection. Missing ids are ignored."""
        with self._lock:
            self._online = [user for user in self._online if user.socketId != connection_id]
            logger.debug(f"Removed {connection_id} from global presence ({len(self._online)} online)")
            return list(self._online)

    def online(self) -> List[OnlineUser]:
        with self._lock:
            return list(self._online)

    def join_room(self, room: str, connection_id: str, user_id: str) -> List[OnlineUser]:
        """Insert the member, or replace it in place if the connection is already in the room."""
        member = OnlineUser(socketId=connection_id, userId=user_id)
        with self._lock:
            users = self._rooms.setdefault(room, [])
            for idx, existing in enumerate(users):
                if existing.socketId == connection_id:
                    users[idx] = member
                    logger.debug(f"Updated {connection_id} in room {room} as {user_id}")
                    break
            else:
                users.append(member)
                logger.debug(f"Added {connection_id} to room {room} as {user_id} ({len(users)} members)")
            return list(users)

    def leave_room(self, room: str, connection_id: str) -> List[OnlineUser]:
        with self._lock:
            users = self._rooms.get(room)
            if users is None:
                return []
            remaining = [user for user in users if user.socketId != connection_id]
            self._rooms[room] = remaining
            if len(remaining) != len(users):
                logger.debug(f"Removed {connection_id} from room {room} ({len(remaining)} members)")
            return list(remaining)

    def lookup(self, room: str, connection_id: str) -> Optional[OnlineUser]:
        with self._lock:
            for user in self._rooms.get(room, []):
                if user.socketId == connection_id:
                    return user
            return None

    def members(self, room: str) -> List[OnlineUser]:
        with self._lock:
            return list(self._rooms.get(room, []))

    def room_counts(self) -> Dict[str, int]:
        """Member count of every non-empty room."""
        with self._lock:
            return {room: len(users) for room, users in self._rooms.items() if users}
