"""nexus-relay — broadcast chat relay for text completion backends."""

from nexus_relay.broadcast import BroadcastMedium, Subscription, Lagged, BroadcastClosed
from nexus_relay.relay_messages import InboundRequest, MalformedMessageError, parse_inbound
from nexus_relay.backends import BackendCapability, BackendError
from nexus_relay.backend_manager import BackendManager
from nexus_relay.dispatcher import PromptDispatcher
from nexus_relay.connection import ConnectionSession
from nexus_relay.config import RelayConfig, ConfigurationError

__all__ = [
    "BroadcastMedium",
    "Subscription",
    "Lagged",
    "BroadcastClosed",
    "InboundRequest",
    "MalformedMessageError",
    "parse_inbound",
    "BackendCapability",
    "BackendError",
    "BackendManager",
    "PromptDispatcher",
    "ConnectionSession",
    "RelayConfig",
    "ConfigurationError",
    "RelayHub",
    "create_app",
]


def __getattr__(name: str):
    if name == "RelayHub":
        from nexus_relay.api import RelayHub
        return RelayHub
    if name == "create_app":
        from nexus_relay.standalone import create_app
        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
