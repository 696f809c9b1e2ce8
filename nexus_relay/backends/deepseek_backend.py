"""DeepSeek backend implementation."""
import os

from nexus_relay.backends import register_backend
from .openai_compat_backend import OpenAICompatibleBackend


@register_backend("deepseek")
class DeepSeekBackend(OpenAICompatibleBackend):
    """DeepSeek backend, reached through its OpenAI-compatible API."""

    DEFAULT_BASE_URL = "https://api.deepseek.com/v1"
    DEFAULT_MODEL = "deepseek-chat"

    def __init__(self):
        """Initialize DeepSeek backend. ``DEEPSEEK_MODEL`` overrides the model."""
        super().__init__(
            "deepseek",
            "DeepSeek",
            model=os.environ.get("DEEPSEEK_MODEL", self.DEFAULT_MODEL),
            base_url=self.DEFAULT_BASE_URL,
        )
