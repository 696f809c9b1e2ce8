"""Routes parsed prompts to backends and publishes the resulting relay lines."""
import asyncio
import logging
from typing import Optional

from .backend_manager import BackendManager
from .backends import BackendError
from .broadcast import BroadcastMedium
from .relay_messages import (
    UNKNOWN_MODEL_REPLY,
    InboundRequest,
    format_echo,
    format_error,
    format_reply,
)

logger = logging.getLogger(__name__)


class PromptDispatcher:
    """Turns one inbound request into an echo line plus a result or error line.

    Backend failures never leave :meth:`dispatch`; they become an error line
    on the medium so the session keeps going.
    """

    def __init__(
        self,
        medium: BroadcastMedium,
        backends: BackendManager,
        backend_timeout: Optional[float] = None,
    ):
        """Initialize dispatcher.

        :param medium: Where echo and result lines are published
        :param backends: Identifier -> backend lookup
        :param backend_timeout: Seconds to wait for a reply, None to wait indefinitely
        """
        self.medium = medium
        self.backends = backends
        self.backend_timeout = backend_timeout

    async def dispatch(self, request: InboundRequest) -> None:
        # echo first so the prompt is visible even if the backend fails
        self.medium.publish(format_echo(request.text))

        resolved = self.backends.resolve(request.model)
        if resolved is None:
            logger.info(f"[RELAY] Unknown backend '{request.model}'")
            self.medium.publish(format_reply(request.model, UNKNOWN_MODEL_REPLY))
            return
        backend, credential = resolved

        try:
            reply = await self._complete(backend, request.text, credential)
        except BackendError as e:
            logger.error(f"[RELAY] API error from {request.model}: {e.detail}")
            self.medium.publish(format_error(request.model, e.detail))
            return
        except Exception as e:
            logger.error(f"[RELAY] Unexpected error from {request.model}: {type(e).__name__}: {e}")
            self.medium.publish(format_error(request.model, str(e) or type(e).__name__))
            return
        self.medium.publish(format_reply(request.model, reply))

    async def _complete(self, backend, prompt: str, credential: str) -> str:
        if self.backend_timeout is None:
            return await backend.complete(prompt, credential)
        try:
            return await asyncio.wait_for(backend.complete(prompt, credential), timeout=self.backend_timeout)
        except asyncio.TimeoutError:
            raise BackendError(f"no reply within {self.backend_timeout:g}s") from None
