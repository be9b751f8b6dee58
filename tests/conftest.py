"""Shared test fixtures for the Ollama provider."""

from typing import Any

import pytest

from engines import (
    BaseEngine,
    GenerationError,
    GenerationRequest,
    GenerationResponse,
)
from provider.config import ProviderConfig
from provider.service import OllamaProvider

OLLAMA_URL = "http://localhost:11434"
OLLAMA_GENERATE_URL = f"{OLLAMA_URL}/api/generate"

OLLAMA_FINAL_REPLY: dict[str, Any] = {
    "model": "llama3",
    "created_at": "2024-05-01T12:00:00.000000Z",
    "response": "Hello back",
    "done": True,
    "context": [1, 2, 3],
    "total_duration": 5_000_000,
    "load_duration": 1_000_000,
    "prompt_eval_count": 4,
    "prompt_eval_duration": 2_000_000,
    "eval_count": 3,
    "eval_duration": 1_500_000,
}


class FakeEngine(BaseEngine):
    """Engine that records calls instead of reaching a server."""

    def __init__(self, host: str, port: int, reply: str = "Hello back") -> None:
        self.host = host
        self.port = port
        self.reply = reply
        self.error: str | None = None
        self.calls: list[tuple[str, GenerationRequest]] = []

    async def generate(
        self, model: str, request: GenerationRequest
    ) -> GenerationResponse:
        self.calls.append((model, request))
        if self.error is not None:
            raise GenerationError(self.error)
        return GenerationResponse(
            model=model,
            created_at="2024-05-01T12:00:00Z",
            response=self.reply,
            done=True,
            prompt_eval_count=4,
            eval_count=3,
        )


class EngineRecorder:
    """Engine factory that remembers every engine it builds."""

    def __init__(self) -> None:
        self.engines: list[FakeEngine] = []
        self.error: str | None = None

    def __call__(self, host: str, port: int) -> FakeEngine:
        engine = FakeEngine(host, port)
        engine.error = self.error
        self.engines.append(engine)
        return engine

    @property
    def calls(self) -> list[tuple[str, GenerationRequest]]:
        return [call for engine in self.engines for call in engine.calls]


@pytest.fixture
def default_config() -> ProviderConfig:
    """Default configuration matching the built-in settings."""
    return ProviderConfig(model="llama3", host="http://localhost", port=11434)


@pytest.fixture
def engines() -> EngineRecorder:
    """Recording engine factory."""
    return EngineRecorder()


@pytest.fixture
def provider(default_config: ProviderConfig, engines: EngineRecorder) -> OllamaProvider:
    """Provider wired to the recording engine factory."""
    return OllamaProvider(default_config, engine_factory=engines)
