"""
OpenAI-compatible Chat Completions backend.

Shared by backends whose APIs speak the OpenAI Chat Completions protocol
(OpenAI itself, DeepSeek).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from openai import APIStatusError, AsyncOpenAI, OpenAIError

from nexus_relay.backends.backend_base import BackendCapability, BackendError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


class OpenAICompatibleBackend(BackendCapability):
    """Single-turn Chat Completions call with a fixed system prompt."""

    def __init__(
        self,
        name: str,
        label: str,
        model: str,
        base_url: Optional[str] = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        super().__init__(name, label)
        self.model = model
        self.base_url = base_url
        self.system_prompt = system_prompt

    def _build_messages(self, prompt: str) -> List[Dict[str, Any]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": prompt},
        ]

    def _create_client(self, credential: str) -> AsyncOpenAI:
        # Failures are reported to the clients as-is, the relay does not retry
        return AsyncOpenAI(api_key=credential, base_url=self.base_url, max_retries=0)

    async def complete(self, prompt: str, credential: str) -> str:
        try:
            async with self._create_client(credential) as client:
                response = await client.chat.completions.create(
                    model=self.model,
                    messages=self._build_messages(prompt),
                )
        except APIStatusError as e:
            raise self.status_error(e.status_code, e.response.text) from e
        except OpenAIError as e:
            raise BackendError(str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        if content is None:
            raise self.parse_error()
        logger.debug(f"[BACKEND] {self.name} replied with {len(content)} chars")
        return content
