"""Test configuration and fixtures."""
import asyncio
import json
from typing import List, Optional

import pytest
from starlette.websockets import WebSocketDisconnect, WebSocketState

from nexus_relay.backend_manager import BackendManager
from nexus_relay.backends import BackendCapability, BackendError
from nexus_relay.broadcast import BroadcastMedium
from nexus_relay.dispatcher import PromptDispatcher


class FakeWebSocket:
    """In-memory stand-in for a starlette WebSocket."""

    def __init__(self):
        self.incoming: asyncio.Queue = asyncio.Queue()
        self.sent: List[str] = []
        self.accepted = asyncio.Event()
        self.closed = False
        self.fail_sends = False
        self.application_state = WebSocketState.CONNECTING
        self.client_state = WebSocketState.CONNECTING

    # server side

    async def accept(self):
        self.application_state = WebSocketState.CONNECTED
        self.client_state = WebSocketState.CONNECTED
        self.accepted.set()

    async def receive(self) -> dict:
        frame = await self.incoming.get()
        if frame["type"] == "websocket.disconnect":
            self.client_state = WebSocketState.DISCONNECTED
        return frame

    async def send_text(self, data: str) -> None:
        if self.fail_sends:
            raise WebSocketDisconnect(1006)
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.application_state = WebSocketState.DISCONNECTED
        self.closed = True

    # client side

    def push_text(self, text: str) -> None:
        self.incoming.put_nowait({"type": "websocket.receive", "text": text})

    def push_json(self, payload) -> None:
        self.push_text(json.dumps(payload))

    def push_bytes(self, data: bytes) -> None:
        self.incoming.put_nowait({"type": "websocket.receive", "bytes": data})

    def disconnect(self, code: int = 1000) -> None:
        self.incoming.put_nowait({"type": "websocket.disconnect", "code": code})

    async def wait_for_sent(self, count: int, timeout: float = 2.0) -> List[str]:
        async def _poll():
            while len(self.sent) < count:
                await asyncio.sleep(0.005)
        await asyncio.wait_for(_poll(), timeout)
        return self.sent


class FakeBackend(BackendCapability):
    """Backend returning canned replies, optionally failing or blocking."""

    def __init__(
        self,
        name: str = "echo",
        reply: str = "pong",
        error: Optional[str] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        super().__init__(name, name.capitalize())
        self.reply = reply
        self.error = error
        self.gate = gate
        self.calls: List[tuple] = []
        self.cancelled = False

    async def complete(self, prompt: str, credential: str) -> str:
        self.calls.append((prompt, credential))
        if self.gate is not None:
            try:
                await self.gate.wait()
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise BackendError(self.error)
        return self.reply


def make_manager(*backends: BackendCapability) -> BackendManager:
    manager = BackendManager()
    for backend in backends:
        manager.register_backend(backend, f"{backend.name}-key")
    return manager


@pytest.fixture
def medium():
    medium = BroadcastMedium(capacity=16)
    yield medium
    medium.close()


@pytest.fixture
def echo_backend():
    return FakeBackend("echo", reply="pong")


@pytest.fixture
def dispatcher(medium, echo_backend):
    return PromptDispatcher(medium, make_manager(echo_backend))
