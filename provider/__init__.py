"""Capability provider bridging linked components to Ollama."""

from provider.config import ProviderConfig, Settings, get_host_and_port
from provider.errors import (
    InvalidURLError,
    MissingContextError,
    NotLinkedError,
    ProviderError,
)
from provider.links import LinkManager
from provider.service import Context, GenerateResult, OllamaProvider

__all__ = [
    "Context",
    "GenerateResult",
    "InvalidURLError",
    "LinkManager",
    "MissingContextError",
    "NotLinkedError",
    "OllamaProvider",
    "ProviderConfig",
    "ProviderError",
    "Settings",
    "get_host_and_port",
]
