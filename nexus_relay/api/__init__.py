"""WebSocket API for browser relay clients.

Provides SessionRegistry and RelayHub.
The WS endpoint itself lives in nexus_relay.server.build_ws_router().
"""

from .relay_session_api import RelayHub, SessionEntry, SessionRegistry

__all__ = ["RelayHub", "SessionEntry", "SessionRegistry"]
