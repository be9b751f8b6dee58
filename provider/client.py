"""Client for a running provider's link and generation routes."""

from dataclasses import asdict
from typing import Any

import httpx

from engines import GenerationRequest, GenerationResponse
from provider.middleware import COMPONENT_HEADER


class GenerateError(Exception):
    """Raised when the provider reports that generation failed."""

    pass


class ProviderClient:
    """Calls a running provider on behalf of one component."""

    def __init__(
        self,
        provider_url: str = "http://localhost:8080",
        component_id: str = "cli",
        timeout: float | None = 120.0,
    ) -> None:
        """Initialize provider client.

        Args:
            provider_url: Base URL of the provider.
            component_id: Identity sent with every call.
            timeout: Request timeout in seconds, None to wait indefinitely.
        """
        self.provider_url = provider_url.rstrip("/")
        self.component_id = component_id
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.provider_url,
            timeout=httpx.Timeout(self.timeout),
            headers={COMPONENT_HEADER: self.component_id},
        )

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        """Generate text through the provider.

        Args:
            request: Prompt and optional base64 images.

        Returns:
            The generated response.

        Raises:
            GenerateError: If the model server could not generate.
            httpx.HTTPError: If the provider call itself failed.
        """
        async with self._client() as client:
            response = await client.post("/generate", json=asdict(request))
            response.raise_for_status()
            data: dict[str, Any] = response.json()

        if data.get("err") is not None:
            raise GenerateError(data["err"])
        return GenerationResponse(**data["ok"])

    async def link(self, config: dict[str, str]) -> dict[str, Any]:
        """Link this component to the provider with the given config."""
        async with self._client() as client:
            response = await client.put(
                f"/links/{self.component_id}", json={"config": config}
            )
            response.raise_for_status()
            return response.json()

    async def unlink(self) -> None:
        """Drop this component's link."""
        async with self._client() as client:
            response = await client.delete(f"/links/{self.component_id}")
            response.raise_for_status()
