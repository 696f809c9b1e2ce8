"""Server integration helpers (framework-agnostic).

Host apps call these to register the relay's WebSocket and HTTP routes.
"""

import logging

from nexus_relay.api import RelayHub

logger = logging.getLogger(__name__)

# API path constants
WS_PATH = "/ws"
HEALTH_PATH = "/health"


def build_ws_router(hub: RelayHub):
    """Build the FastAPI APIRouter with the relay WebSocket and a health probe.

    The host app should include this router once at startup.
    """
    from fastapi import APIRouter
    from starlette.websockets import WebSocket

    router = APIRouter()

    # ---- Health ----

    @router.get(HEALTH_PATH)
    async def health():
        return {
            "status": "ok",
            "sessions": hub.registry.active_count,
            "subscribers": hub.medium.subscriber_count,
            "backends": sorted(hub.backends.identifiers),
        }

    # ---- WebSocket relay ----

    @router.websocket(WS_PATH)
    async def websocket_relay(ws: WebSocket):
        """WebSocket endpoint shared by every chat client."""
        logger.info(f"[WS] Connection attempt from {ws.client}")
        await hub.serve(ws)

    return router
