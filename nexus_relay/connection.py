"""One live client connection and its two concurrent flows.

Outbound relay: broadcast medium -> client.
Inbound processor: client -> parse -> dispatcher -> broadcast medium.

The two flows race. Whichever ends first, for any reason, gets the other
one cancelled, and only once both have stopped is the subscription released
and the session over.
"""

import asyncio
import logging
from typing import Optional
from uuid import uuid4

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from .broadcast import BroadcastClosed, BroadcastMedium, Lagged, Subscription
from .dispatcher import PromptDispatcher
from .relay_messages import MalformedMessageError, format_lag_notice, parse_inbound

logger = logging.getLogger(__name__)


class ConnectionSession:
    """Relay session bound to one WebSocket.

    A session runs once; a reconnecting client gets a new session.
    """

    def __init__(
        self,
        websocket: WebSocket,
        medium: BroadcastMedium,
        dispatcher: PromptDispatcher,
        *,
        session_id: Optional[str] = None,
        lag_notice: bool = False,
    ):
        self.session_id = session_id or str(uuid4())
        self._ws = websocket
        self._medium = medium
        self._dispatcher = dispatcher
        self._lag_notice = lag_notice
        self._started = False
        self.subscription: Optional[Subscription] = None

    async def run(self) -> None:
        """Serve the connection until either flow ends, then tear both down."""
        if self._started:
            raise RuntimeError(f"Session {self.session_id} already ran")
        self._started = True

        # subscribe before the handshake completes so no line published after
        # the client sees the connection open is missed
        try:
            with self._medium.subscribe() as subscription:
                self.subscription = subscription
                await self._ws.accept()
                logger.info(f"[WS] Session {self.session_id} connected")

                outbound = asyncio.create_task(
                    self._relay_outbound(subscription), name=f"relay-out-{self.session_id}"
                )
                inbound = asyncio.create_task(
                    self._process_inbound(), name=f"relay-in-{self.session_id}"
                )
                try:
                    done, _ = await asyncio.wait({outbound, inbound}, return_when=asyncio.FIRST_COMPLETED)
                finally:
                    for task in (outbound, inbound):
                        task.cancel()
                    await asyncio.gather(outbound, inbound, return_exceptions=True)

                for task in done:
                    self._log_flow_end(task)
        finally:
            await self._close_transport()
            logger.info(f"[WS] Session {self.session_id} ended")

    # ── Flows ─────────────────────────────────────────────────

    async def _relay_outbound(self, subscription: Subscription) -> None:
        while True:
            try:
                message = await subscription.receive()
            except Lagged as e:
                logger.warning(f"[WS] Session {self.session_id} lagged, {e.missed} messages dropped")
                if not self._lag_notice:
                    continue
                message = format_lag_notice(e.missed)
            await self._ws.send_text(message)

    async def _process_inbound(self) -> None:
        while True:
            frame = await self._ws.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000), frame.get("reason"))

            raw = frame.get("text")
            if raw is None:
                logger.debug(f"[WS] Session {self.session_id} ignored a binary frame")
                continue

            try:
                request = parse_inbound(raw)
            except MalformedMessageError as e:
                logger.warning(f"[WS] Session {self.session_id} sent a malformed message: {e}")
                continue

            await self._dispatcher.dispatch(request)

    # ── Teardown ──────────────────────────────────────────────

    def _log_flow_end(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        flow = task.get_name()
        if error is None or isinstance(error, BroadcastClosed):
            logger.info(f"[WS] {flow} finished")
        elif isinstance(error, WebSocketDisconnect):
            logger.info(f"[WS] {flow} saw client disconnect (code {error.code})")
        else:
            logger.error(f"[WS] {flow} failed: {type(error).__name__}: {error}")

    async def _close_transport(self) -> None:
        if self._ws.application_state != WebSocketState.CONNECTED:
            return
        if self._ws.client_state == WebSocketState.DISCONNECTED:
            return
        try:
            await self._ws.close()
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.debug(f"[WS] Session {self.session_id} close failed: {e}")
