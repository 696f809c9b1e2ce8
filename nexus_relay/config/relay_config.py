"""Relay configuration resolved from the environment at startup."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Dict, Mapping, Optional

from nexus_relay.broadcast import DEFAULT_CAPACITY


class ConfigurationError(RuntimeError):
    """The process environment cannot start the relay."""


def _parse_bool(name: str, value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: Optional[str], default: int) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _parse_timeout(name: str, value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}") from None
    if timeout <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}")
    return timeout


@dataclass
class RelayConfig:
    """Process configuration for the relay, resolved once at startup."""

    CREDENTIAL_ENV_VARS: ClassVar[Dict[str, str]] = {
        "gemini": "GEMINI_API_KEY",
        "openai": "OPENAI_API_KEY",
        "deepseek": "DEEPSEEK_API_KEY",
    }
    """Backend identifier -> environment variable holding its API key."""

    credentials: Dict[str, str] = field(default_factory=dict)
    """Backend identifier -> API key."""
    host: str = "127.0.0.1"
    port: int = 3000
    https: bool = False
    ssl_certfile: Optional[str] = None
    ssl_keyfile: Optional[str] = None
    broadcast_capacity: int = DEFAULT_CAPACITY
    """Per-subscriber buffer of the broadcast medium."""
    backend_timeout: Optional[float] = None
    """Seconds to wait for a backend reply. None waits indefinitely."""
    lag_notice: bool = False
    """Tell a lagging client how many lines it missed."""

    def __post_init__(self):
        if self.broadcast_capacity < 1:
            raise ConfigurationError(f"BROADCAST_CAPACITY must be at least 1, got {self.broadcast_capacity}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """Build the configuration from environment variables.

        :param environ: Mapping to read from, defaults to ``os.environ``
        :return: The resolved configuration
        :raises ConfigurationError: If a backend API key is missing or a value is malformed
        """
        env = os.environ if environ is None else environ

        credentials = {}
        missing = []
        for backend, var in cls.CREDENTIAL_ENV_VARS.items():
            value = env.get(var)
            if not value:
                missing.append(var)
            else:
                credentials[backend] = value
        if missing:
            raise ConfigurationError(f"{', '.join(missing)} must be set")

        https = _parse_bool("HTTPS", env.get("HTTPS"), False)
        cert_dir = Path.home() / ".nexus-relay" / "certs"
        return cls(
            credentials=credentials,
            host=env.get("HOST") or "127.0.0.1",
            port=_parse_int("PORT", env.get("PORT"), 8443 if https else 3000),
            https=https,
            ssl_certfile=env.get("SSL_CERTFILE") or str(cert_dir / "localhost.pem"),
            ssl_keyfile=env.get("SSL_KEYFILE") or str(cert_dir / "localhost-key.pem"),
            broadcast_capacity=_parse_int("BROADCAST_CAPACITY", env.get("BROADCAST_CAPACITY"), DEFAULT_CAPACITY),
            backend_timeout=_parse_timeout("BACKEND_TIMEOUT", env.get("BACKEND_TIMEOUT")),
            lag_notice=_parse_bool("LAG_NOTICE", env.get("LAG_NOTICE"), False),
        )
