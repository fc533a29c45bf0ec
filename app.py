from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import socketio
from typing import Optional

from routers.rooms import rooms_router
from presence import PresenceRegistry
from events import EventRouter
from constants import ALLOWED_ORIGINS, LOG_LEVEL, LOG_FILE, PORT
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


def create_app(registry: Optional[PresenceRegistry] = None, allowed_origins: Optional[list] = None):
    """Build the FastAPI app and the socket.io server around one registry.

    Returns ``(asgi_app, app, sio, router)``. ``asgi_app`` is what uvicorn
    serves: socket.io traffic goes to ``sio``, everything else to ``app``.
    """
    registry = registry if registry is not None else PresenceRegistry()
    origins = allowed_origins or ALLOWED_ORIGINS

    app = FastAPI(title="Presence Relay")
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(rooms_router)

    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins="*" if origins == ["*"] else origins,
    )
    router = EventRouter(registry, sio)
    router.register(sio)

    asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)
    logger.info(f"Allowed origins: {', '.join(origins)}")
    return asgi_app, app, sio, router


asgi_app, app, sio, event_router = create_app()
logger.info(f"Chat socket server configured for port {PORT}")
