from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import HealthResponse, OnlineUsersResponse, RoomDetailsResponse, RoomListResponse, RoomSummary
from presence import PresenceRegistry
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(tags=["presence"])


def get_registry(request: Request) -> PresenceRegistry:
    return request.app.state.registry


@rooms_router.get("/health", response_model=HealthResponse)
def health(request: Request):
    registry = get_registry(request)
    return HealthResponse(status="ok", online=len(registry.online()))


@rooms_router.get("/online", response_model=OnlineUsersResponse)
def online_users(request: Request):
    """Every connected socket, in connect order."""
    users = get_registry(request).online()
    return OnlineUsersResponse(online_count=len(users), online_users=users)


@rooms_router.get("/rooms", response_model=RoomListResponse)
def list_rooms(request: Request):
    """Rooms that currently have at least one member, sorted by name."""
    counts = get_registry(request).room_counts()
    logger.debug(f"Room list request: {len(counts)} occupied rooms")
    return RoomListResponse(rooms=[
        RoomSummary(room=room, online_users_count=count)
        for room, count in sorted(counts.items())
    ])


@rooms_router.get("/rooms/{room}", response_model=RoomDetailsResponse)
def get_room_details(room: str, request: Request):
    """
    Members of a room in join order.

    An empty room and an unknown room look the same: zero members.
    """
    room_name = room.strip()
    if not room_name:
        logger.warning("Room details failed: blank room name")
        raise HTTPException(status_code=404, detail="Room not found")

    members = get_registry(request).members(room_name)
    logger.info(f"Room details retrieved for {room_name}: {len(members)} members online")
    return RoomDetailsResponse(
        room=room_name,
        online_users_count=len(members),
        online_users=members,
    )
