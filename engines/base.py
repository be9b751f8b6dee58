"""Abstract base class and shared types for model-server engines."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class GenerationError(Exception):
    """Raised when the model server fails to produce a completion."""

    pass


@dataclass(frozen=True)
class GenerationRequest:
    """Request for a single text generation."""

    prompt: str
    images: list[str] | None = None


@dataclass(frozen=True)
class GenerationResponse:
    """Result of a single text generation.

    The trailing metrics are only populated when the model server reports
    the generation as done.
    """

    model: str
    created_at: str
    response: str
    done: bool
    context: list[int] | None = None
    total_duration: int | None = None
    prompt_eval_count: int | None = None
    prompt_eval_duration: int | None = None
    eval_count: int | None = None
    eval_duration: int | None = None


class BaseEngine(ABC):
    """Abstract base class for model-server engines.

    An engine is bound to one server address and issues one completion
    call per ``generate`` invocation.
    """

    @abstractmethod
    async def generate(
        self, model: str, request: GenerationRequest
    ) -> GenerationResponse:
        """Generate a completion for the given request.

        Args:
            model: Name of the model to run.
            request: Prompt and optional base64 images.

        Returns:
            The completed generation.

        Raises:
            GenerationError: If the server call fails.
        """
        ...
