from .relay_config import RelayConfig, ConfigurationError

__all__ = ["RelayConfig", "ConfigurationError"]
