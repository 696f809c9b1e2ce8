"""Integration tests against the real backend APIs. Skipped without API keys."""
import os

import pytest

from nexus_relay.backends import get_backend


@pytest.mark.asyncio
@pytest.mark.parametrize("backend_name,key_var", [
    ("gemini", "GEMINI_API_KEY"),
    ("openai", "OPENAI_API_KEY"),
    ("deepseek", "DEEPSEEK_API_KEY"),
])
async def test_complete_live(backend_name, key_var):
    key = os.environ.get(key_var)
    if not key:
        pytest.skip(f"{key_var} environment variable not set, skipping {backend_name} integration test.")

    backend = get_backend(backend_name)()
    reply = await backend.complete("Reply with the single word: hello", key)
    assert isinstance(reply, str)
    assert reply.strip()
