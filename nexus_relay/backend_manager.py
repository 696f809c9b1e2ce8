"""Backend manager resolving backend identifiers to capabilities and credentials."""
import logging
from typing import Dict, List, Optional, Tuple

from .backends import BackendCapability, get_backend

logger = logging.getLogger(__name__)


class BackendManager:
    """Holds the backends the relay can dispatch to, each with its credential."""

    def __init__(self, credentials: Optional[Dict[str, str]] = None):
        """Initialize backend manager.

        :param credentials: Backend identifier -> API key. One registered
            backend is instantiated per entry.
        :raises ValueError: If a credential names an unregistered backend
        """
        self._backends: Dict[str, Tuple[BackendCapability, str]] = {}
        for name, credential in (credentials or {}).items():
            backend_class = get_backend(name)
            self.register_backend(backend_class(), credential)

    def register_backend(self, backend: BackendCapability, credential: str) -> None:
        """Register a backend instance, replacing any backend with the same name.

        :param backend: The backend to dispatch ``backend.name`` requests to
        :param credential: The API key passed with every call
        """
        self._backends[backend.name] = (backend, credential)
        logger.info(f"[BACKEND] Registered {backend.label} as '{backend.name}'")

    def resolve(self, name: str) -> Optional[Tuple[BackendCapability, str]]:
        """Look a backend up by exact identifier.

        :return: ``(backend, credential)`` or None for unknown identifiers
        """
        return self._backends.get(name)

    @property
    def identifiers(self) -> List[str]:
        return list(self._backends)
