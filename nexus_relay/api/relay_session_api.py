"""WebSocket relay sessions for browser clients.

SessionRegistry — maps session_id → live ConnectionSession
RelayHub — owns the broadcast medium and turns accepted sockets into sessions
The WS endpoint itself lives in nexus_relay.server.build_ws_router().
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from starlette.websockets import WebSocket

from nexus_relay.backend_manager import BackendManager
from nexus_relay.broadcast import BroadcastMedium
from nexus_relay.connection import ConnectionSession
from nexus_relay.dispatcher import PromptDispatcher

logger = logging.getLogger(__name__)


# ── Session Registry ────────────────────────────────────────────────


@dataclass
class SessionEntry:
    """A live relay session with its metadata."""
    session: ConnectionSession
    created_at: float = field(default_factory=time.monotonic)


class SessionRegistry:
    """Maps session_id → SessionEntry for the sessions currently running."""

    def __init__(self):
        self._sessions: Dict[str, SessionEntry] = {}

    def register(self, session: ConnectionSession) -> SessionEntry:
        entry = SessionEntry(session=session)
        self._sessions[session.session_id] = entry
        logger.info(f"[REGISTRY] Registered session {session.session_id} "
                    f"(active sessions: {len(self._sessions)})")
        return entry

    def get_session(self, session_id: str) -> Optional[SessionEntry]:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> Optional[SessionEntry]:
        entry = self._sessions.pop(session_id, None)
        if entry:
            lifetime = time.monotonic() - entry.created_at
            logger.info(f"[REGISTRY] Removed session {session_id} after {lifetime:.1f}s")
        return entry

    @property
    def active_count(self) -> int:
        return len(self._sessions)


# ── Relay Hub ───────────────────────────────────────────────────────


class RelayHub:
    """Accepts client sockets and runs one ConnectionSession per socket.

    The hub is created once per application, together with the broadcast
    medium it owns; :meth:`shutdown` closes the medium, which ends every
    session's outbound relay.
    """

    def __init__(
        self,
        medium: BroadcastMedium,
        backends: BackendManager,
        *,
        backend_timeout: Optional[float] = None,
        lag_notice: bool = False,
    ):
        self.medium = medium
        self.backends = backends
        self.dispatcher = PromptDispatcher(medium, backends, backend_timeout=backend_timeout)
        self.registry = SessionRegistry()
        self.lag_notice = lag_notice

    async def serve(self, websocket: WebSocket) -> None:
        """Run a new session on ``websocket`` until it ends."""
        session = ConnectionSession(
            websocket,
            self.medium,
            self.dispatcher,
            lag_notice=self.lag_notice,
        )
        self.registry.register(session)
        try:
            await session.run()
        finally:
            self.registry.remove(session.session_id)

    def shutdown(self) -> None:
        logger.info(f"[RELAY] Shutting down with {self.registry.active_count} active sessions")
        self.medium.close()
