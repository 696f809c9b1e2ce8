"""Backend registry for text completion services."""
from typing import Dict, Type

# First, import the base types
from .backend_base import BackendCapability, BackendError

# Registry of backend implementations
BACKENDS: Dict[str, Type[BackendCapability]] = {}


def register_backend(backend_name: str):
    """Decorator to register backend implementations."""
    def decorator(backend_class: Type[BackendCapability]):
        BACKENDS[backend_name] = backend_class
        return backend_class
    return decorator


def get_backend(backend: str) -> Type[BackendCapability]:
    """Get backend implementation class.

    Args:
        backend: Backend identifier

    Returns:
        Backend implementation class

    Raises:
        ValueError: If backend is not registered
    """
    if backend not in BACKENDS:
        raise ValueError(f"Backend {backend} not registered")
    return BACKENDS[backend]


# Import all backend implementations to register them
# Note: These imports must come after the register_backend function is defined
from .openai_backend import OpenAIBackend  # noqa: E402
from .deepseek_backend import DeepSeekBackend  # noqa: E402
from .gemini_backend import GeminiBackend  # noqa: E402


__all__ = [
    'BackendCapability',
    'BackendError',
    'BACKENDS',
    'register_backend',
    'get_backend',
    'OpenAIBackend',
    'DeepSeekBackend',
    'GeminiBackend',
]
