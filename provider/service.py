"""Ollama capability provider: link lifecycle and generation."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from engines import (
    BaseEngine,
    GenerationError,
    GenerationRequest,
    GenerationResponse,
    OllamaEngine,
)
from provider.config import ProviderConfig, Settings
from provider.errors import MissingContextError
from provider.links import LinkManager

logger = logging.getLogger(__name__)

# Builds an engine bound to a host and port
EngineFactory = Callable[[str, int], BaseEngine]


@dataclass(frozen=True)
class Context:
    """Metadata accompanying a generation call."""

    component: str | None = None


@dataclass(frozen=True)
class GenerateResult:
    """Outcome of a generation call that reached the model server.

    Exactly one of ``ok`` and ``err`` is set. A populated ``err`` means the
    call itself succeeded but the model server could not generate.
    """

    ok: GenerationResponse | None = None
    err: str | None = None

    @property
    def is_ok(self) -> bool:
        return self.err is None


class OllamaProvider:
    """Answers generation requests on behalf of linked components."""

    def __init__(
        self,
        default_config: ProviderConfig,
        engine_factory: EngineFactory | None = None,
        timeout: float | None = 120.0,
    ) -> None:
        """Initialize the provider.

        Args:
            default_config: Configuration used when a link carries none.
            engine_factory: Builds an engine for a host and port. Defaults to
                a fresh ``OllamaEngine`` per call.
            timeout: Timeout handed to the default engine factory.
        """
        self.links = LinkManager(default_config)
        self.timeout = timeout
        self._engine_factory = engine_factory or self._ollama_engine

    @classmethod
    def from_settings(cls, settings: Settings) -> "OllamaProvider":
        """Build a provider from process settings."""
        return cls(
            ProviderConfig.from_settings(settings),
            timeout=settings.ollama_timeout,
        )

    @property
    def default_config(self) -> ProviderConfig:
        return self.links.default_config

    def _ollama_engine(self, host: str, port: int) -> BaseEngine:
        return OllamaEngine(host=host, port=port, timeout=self.timeout)

    async def receive_link_config(
        self, source_id: str, config: Mapping[str, str]
    ) -> ProviderConfig:
        """Handle a link from a component that will call this provider.

        Raises:
            InvalidURLError: If the link URL is malformed.
        """
        return await self.links.establish(source_id, config)

    async def delete_link(self, source_id: str) -> None:
        """Handle notification that a link is dropped."""
        await self.links.remove(source_id)
        logger.debug(
            "finished processing delete link for component %s", source_id
        )

    async def shutdown(self) -> None:
        """Forget all links. In-flight generation calls are left to finish."""
        await self.links.clear()
        logger.info("Provider shut down, all links cleared")

    async def generate(
        self, ctx: Context | None, request: GenerationRequest
    ) -> GenerateResult:
        """Run one generation for the calling component.

        Args:
            ctx: Call context carrying the caller identity.
            request: Prompt and optional base64 images.

        Returns:
            The response, or the model server's failure as an error string.

        Raises:
            MissingContextError: If no caller identity was supplied.
            NotLinkedError: If the caller is not linked.
        """
        if ctx is None:
            raise MissingContextError("no context provided")
        if not ctx.component:
            raise MissingContextError("Context is missing component ID")

        config = await self.links.lookup(ctx.component)
        engine = self._engine_factory(config.host, config.port)

        try:
            response = await engine.generate(config.model, request)
        except GenerationError as e:
            logger.warning(
                "Generation failed for component %s against %s:%s: %s",
                ctx.component,
                config.host,
                config.port,
                e,
            )
            return GenerateResult(err=f"Error generating: {e}")

        return GenerateResult(ok=response)
