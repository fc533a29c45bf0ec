from pydantic import BaseModel

from schemas.presence import OnlineUser


class HealthResponse(BaseModel):
    status: str
    online: int


class OnlineUsersResponse(BaseModel):
    online_count: int
    online_users: list[OnlineUser]


class RoomSummary(BaseModel):
    room: str
    online_users_count: int


class RoomListResponse(BaseModel):
    rooms: list[RoomSummary]


class RoomDetailsResponse(BaseModel):
    room: str
    online_users_count: int
    online_users: list[OnlineUser]
