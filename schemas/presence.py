from pydantic import BaseModel, ConfigDict
from typing import Any, Optional


class OnlineUser(BaseModel):
    """One entry of a usersOnline list. Field names are the wire names."""
    socketId: str
    userId: str


class ObjectIdentity(BaseModel):
    """Structured identity sent with joinRoom. The first non-null field wins."""
    model_config = ConfigDict(extra="ignore")

    uid: Optional[Any] = None
    userId: Optional[Any] = None
    id: Optional[Any] = None


class ChatMessagePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    userId: Optional[Any] = None
    message: Optional[Any] = None
    timestamp: Optional[Any] = None
    clientId: Optional[Any] = None
    room: Optional[Any] = None


class ChatMessage(BaseModel):
    userId: str
    message: str
    timestamp: Any
    clientId: Optional[Any] = None
