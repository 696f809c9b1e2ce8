"""
Google Gemini backend using the google-genai SDK.
"""
from __future__ import annotations

import logging
import os
from typing import Dict

import httpx
from google import genai
from google.genai import errors

from nexus_relay.backends import register_backend
from nexus_relay.backends.backend_base import BackendCapability, BackendError

logger = logging.getLogger(__name__)


@register_backend("gemini")
class GeminiBackend(BackendCapability):
    """Gemini ``generateContent`` backend."""

    DEFAULT_MODEL = "gemini-1.5-flash"

    def __init__(self) -> None:
        """Initialize Gemini backend. ``GEMINI_MODEL`` overrides the model."""
        super().__init__("gemini", "Gemini")
        self.model = os.environ.get("GEMINI_MODEL", self.DEFAULT_MODEL)
        self._clients: Dict[str, genai.Client] = {}

    def _client_for(self, credential: str) -> genai.Client:
        client = self._clients.get(credential)
        if client is None:
            client = genai.Client(api_key=credential)
            self._clients[credential] = client
        return client

    async def complete(self, prompt: str, credential: str) -> str:
        client = self._client_for(credential)
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
            )
        except errors.APIError as e:
            raise self.status_error(e.code, e.message or e.status) from e
        except httpx.HTTPError as e:
            raise BackendError(f"{type(e).__name__}: {e}") from e

        text = response.text
        if text is None:
            raise self.parse_error()
        logger.debug(f"[BACKEND] gemini replied with {len(text)} chars")
        return text
