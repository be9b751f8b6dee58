"""Engine adapters for LLM inference backends."""

from engines.base import (
    BaseEngine,
    GenerationError,
    GenerationRequest,
    GenerationResponse,
)
from engines.ollama import OllamaEngine

__all__ = [
    "BaseEngine",
    "GenerationError",
    "GenerationRequest",
    "GenerationResponse",
    "OllamaEngine",
]
