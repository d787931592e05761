"""Runtime helpers around the bird_peering renderer."""

from .config import ConfigError, load_config  # noqa: F401

__all__ = [
    "ConfigError",
    "load_config",
]
