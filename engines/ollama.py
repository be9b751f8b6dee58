"""Ollama inference engine adapter."""

import base64
import binascii
from typing import Any

import httpx

from engines.base import (
    BaseEngine,
    GenerationError,
    GenerationRequest,
    GenerationResponse,
)

GENERATE_PATH = "/api/generate"


def _validate_images(images: list[str]) -> list[str]:
    """Check that every image is valid base64.

    Args:
        images: Base64-encoded images.

    Returns:
        The images unchanged.

    Raises:
        GenerationError: If an image is not valid base64.
    """
    for index, image in enumerate(images):
        try:
            base64.b64decode(image, validate=True)
        except (binascii.Error, ValueError) as e:
            raise GenerationError(
                f"image {index} is not valid base64: {e}"
            ) from e
    return images


# Fields every /api/generate reply carries
REQUIRED_REPLY_FIELDS = ("model", "created_at", "response", "done")


def _to_response(data: dict[str, Any]) -> GenerationResponse:
    """Map an Ollama /api/generate reply onto a GenerationResponse.

    Raises:
        GenerationError: If a required reply field is missing.
    """
    missing = [name for name in REQUIRED_REPLY_FIELDS if name not in data]
    if missing:
        raise GenerationError(
            f"unexpected reply shape from Ollama: missing {', '.join(missing)}"
        )

    done = bool(data["done"])
    fields: dict[str, Any] = {
        "model": data["model"],
        "created_at": data["created_at"],
        "response": data["response"],
        "done": done,
    }
    if done:
        fields.update(
            context=data.get("context"),
            total_duration=data.get("total_duration"),
            prompt_eval_count=data.get("prompt_eval_count"),
            prompt_eval_duration=data.get("prompt_eval_duration"),
            eval_count=data.get("eval_count"),
            eval_duration=data.get("eval_duration"),
        )
    return GenerationResponse(**fields)


class OllamaEngine(BaseEngine):
    """Adapter for the Ollama inference server.

    Each call opens its own HTTP client against ``host:port`` and closes it
    once the reply is read. Generation is never streamed.
    """

    def __init__(
        self,
        host: str = "http://localhost",
        port: int = 11434,
        timeout: float | None = 120.0,
    ) -> None:
        """Initialize Ollama engine adapter.

        Args:
            host: Scheme and hostname of the Ollama server.
            port: Port of the Ollama server.
            timeout: Request timeout in seconds, None to wait indefinitely.
        """
        self.host = host.rstrip("/")
        self.port = port
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        """Base URL of the Ollama server."""
        return f"{self.host}:{self.port}"

    def build_payload(
        self, model: str, request: GenerationRequest
    ) -> dict[str, Any]:
        """Build the JSON body for /api/generate.

        Args:
            model: Model name.
            request: Generation request.

        Returns:
            JSON-serializable request body.

        Raises:
            GenerationError: If an image is not valid base64.
        """
        payload: dict[str, Any] = {
            "model": model,
            "prompt": request.prompt,
            "stream": False,
        }
        if request.images:
            payload["images"] = _validate_images(request.images)
        return payload

    async def generate(
        self, model: str, request: GenerationRequest
    ) -> GenerationResponse:
        """Generate a completion using the Ollama API.

        Args:
            model: Model name.
            request: Generation request.

        Returns:
            The completed generation.

        Raises:
            GenerationError: On network failure, a non-success status, an
                undecodable body or an error reported by Ollama.
        """
        payload = self.build_payload(model, request)

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
            ) as client:
                response = await client.post(GENERATE_PATH, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise GenerationError(
                f"Ollama returned HTTP {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"request to {self.base_url} failed: {e}") from e
        except ValueError as e:
            raise GenerationError(f"invalid JSON from Ollama: {e}") from e

        if not isinstance(data, dict):
            raise GenerationError("unexpected reply shape from Ollama")
        if "error" in data:
            raise GenerationError(f"Ollama error: {data['error']}")

        return _to_response(data)
