"""Tests for backend registration and resolution."""
import pytest

from nexus_relay.backend_manager import BackendManager
from nexus_relay.backends import BACKENDS, DeepSeekBackend, GeminiBackend, OpenAIBackend, get_backend
from .conftest import FakeBackend


def test_builtin_backends_are_registered():
    assert {"gemini", "openai", "deepseek"} <= set(BACKENDS)
    assert get_backend("gemini") is GeminiBackend
    assert get_backend("openai") is OpenAIBackend
    assert get_backend("deepseek") is DeepSeekBackend


def test_get_unknown_backend():
    with pytest.raises(ValueError) as exc_info:
        get_backend("invalid-backend")
    assert "Backend invalid-backend not registered" in str(exc_info.value)


def test_manager_from_credentials():
    manager = BackendManager({"gemini": "g-key", "openai": "o-key", "deepseek": "d-key"})
    assert sorted(manager.identifiers) == ["deepseek", "gemini", "openai"]

    backend, credential = manager.resolve("deepseek")
    assert isinstance(backend, DeepSeekBackend)
    assert credential == "d-key"


def test_manager_rejects_unregistered_credential():
    with pytest.raises(ValueError):
        BackendManager({"mystery": "key"})


def test_resolve_is_exact():
    manager = BackendManager({"openai": "o-key"})
    assert manager.resolve("OpenAI") is None
    assert manager.resolve("openai ") is None
    assert manager.resolve("gemini") is None


def test_register_custom_backend():
    manager = BackendManager({"openai": "o-key"})
    custom = FakeBackend("local", reply="hi")
    manager.register_backend(custom, "local-key")

    assert manager.resolve("local") == (custom, "local-key")
    assert "local" in manager.identifiers


def test_register_replaces_existing_backend():
    manager = BackendManager({"openai": "o-key"})
    replacement = FakeBackend("openai")
    manager.register_backend(replacement, "other-key")
    assert manager.resolve("openai") == (replacement, "other-key")
