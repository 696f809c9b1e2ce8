"""Base interface for text completion backends."""
from abc import ABC, abstractmethod


class BackendError(Exception):
    """A backend call failed. ``detail`` is shown to every connected client."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class BackendCapability(ABC):
    """Base class for text completion backends.

    A backend is stateless: every call carries the prompt and the credential
    and either returns the reply text or raises :class:`BackendError`. Any
    request or response shape specific to the remote API stays inside the
    implementation.
    """

    def __init__(self, name: str, label: str):
        """Initialize backend.

        :param name: The backend identifier clients select, "openai", "gemini", etc.
        :param label: The human-readable label, "OpenAI", "Gemini", etc.
        """
        self.name = name
        self.label = label

    @abstractmethod
    async def complete(self, prompt: str, credential: str) -> str:
        """Send ``prompt`` to the backend and return its reply.

        Args:
            prompt: The user's prompt
            credential: API key for this backend

        Returns:
            The reply text

        Raises:
            BackendError: If the call failed for any reason
        """
        pass

    def status_error(self, status, body: str) -> BackendError:
        """Build the error for a non-success HTTP response."""
        return BackendError(f"{self.label} API returned an error. Status: {status}. Body: {body}")

    def parse_error(self) -> BackendError:
        """Build the error for a response that carries no reply text."""
        return BackendError(f"Could not parse text from {self.label} response")
