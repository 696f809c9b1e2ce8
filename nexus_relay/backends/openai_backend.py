"""OpenAI backend implementation."""
import os

from nexus_relay.backends import register_backend
from .openai_compat_backend import OpenAICompatibleBackend


@register_backend("openai")
class OpenAIBackend(OpenAICompatibleBackend):
    """OpenAI Chat Completions backend."""

    DEFAULT_MODEL = "gpt-3.5-turbo"

    def __init__(self):
        """Initialize OpenAI backend. ``OPENAI_MODEL`` overrides the model."""
        super().__init__(
            "openai",
            "OpenAI",
            model=os.environ.get("OPENAI_MODEL", self.DEFAULT_MODEL),
        )
