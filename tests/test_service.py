"""Tests for the provider's link lifecycle and generation calls."""

import asyncio

import httpx
import pytest
import respx

from engines import GenerationRequest, GenerationResponse
from provider.config import ProviderConfig, Settings
from provider.errors import InvalidURLError, MissingContextError, NotLinkedError
from provider.service import Context, GenerateResult, OllamaProvider

from conftest import OLLAMA_FINAL_REPLY, EngineRecorder


class TestLinkLifecycle:
    """Tests for link notifications."""

    @pytest.mark.asyncio
    async def test_end_to_end_links(
        self, provider: OllamaProvider, default_config: ProviderConfig
    ) -> None:
        """Default, merged and rejected links should behave independently."""
        await provider.receive_link_config("caller-a", {})
        assert await provider.links.lookup("caller-a") == default_config

        await provider.receive_link_config(
            "caller-b", {"url": "http://example.com:9000", "model_name": "phi3"}
        )
        assert await provider.links.lookup("caller-b") == ProviderConfig(
            model="phi3", host="http://example.com", port=9000
        )

        with pytest.raises(InvalidURLError):
            await provider.receive_link_config("caller-c", {"url": "not a url"})
        with pytest.raises(NotLinkedError):
            await provider.links.lookup("caller-c")

    @pytest.mark.asyncio
    async def test_delete_link(self, provider: OllamaProvider) -> None:
        """Deleted links should stop resolving; unknown deletes are no-ops."""
        await provider.receive_link_config("caller-a", {})
        await provider.delete_link("caller-a")
        await provider.delete_link("caller-a")
        with pytest.raises(NotLinkedError):
            await provider.links.lookup("caller-a")

    @pytest.mark.asyncio
    async def test_shutdown_clears_links(self, provider: OllamaProvider) -> None:
        """Shutdown should forget every link."""
        await provider.receive_link_config("caller-a", {})
        await provider.receive_link_config("caller-b", {"model_name": "phi3"})
        await provider.shutdown()
        assert len(provider.links) == 0

    def test_from_settings(self) -> None:
        """Provider should take its default config and timeout from settings."""
        provider = OllamaProvider.from_settings(
            Settings(model_name="phi3", url="http://gpu:11500", ollama_timeout=30.0)
        )
        assert provider.default_config == ProviderConfig(
            model="phi3", host="http://gpu", port=11500
        )
        assert provider.timeout == 30.0


class TestGenerate:
    """Tests for OllamaProvider.generate."""

    @pytest.mark.asyncio
    async def test_missing_context(
        self, provider: OllamaProvider, engines: EngineRecorder
    ) -> None:
        """No context should fail before any lookup or upstream call."""
        with pytest.raises(MissingContextError, match="no context provided"):
            await provider.generate(None, GenerationRequest(prompt="Hello"))
        assert engines.engines == []

    @pytest.mark.asyncio
    async def test_context_without_component(
        self, provider: OllamaProvider, engines: EngineRecorder
    ) -> None:
        """A context with no component ID should fail the same way."""
        with pytest.raises(MissingContextError, match="missing component ID"):
            await provider.generate(Context(), GenerationRequest(prompt="Hello"))
        assert engines.engines == []

    @pytest.mark.asyncio
    async def test_unlinked_component(
        self, provider: OllamaProvider, engines: EngineRecorder
    ) -> None:
        """Unlinked callers should fail without reaching the model server."""
        with pytest.raises(NotLinkedError, match="ghost"):
            await provider.generate(
                Context(component="ghost"), GenerationRequest(prompt="Hello")
            )
        assert engines.engines == []

    @pytest.mark.asyncio
    async def test_uses_linked_configuration(
        self, provider: OllamaProvider, engines: EngineRecorder
    ) -> None:
        """The engine should be bound to the caller's host, port and model."""
        await provider.receive_link_config(
            "caller-b", {"url": "http://example.com:9000", "model_name": "phi3"}
        )
        request = GenerationRequest(prompt="Hello", images=["aW1hZ2U="])

        result = await provider.generate(Context(component="caller-b"), request)

        assert result.is_ok
        assert result.ok is not None
        assert result.ok.response == "Hello back"
        assert result.ok.model == "phi3"
        assert (engines.engines[0].host, engines.engines[0].port) == (
            "http://example.com",
            9000,
        )
        assert engines.calls == [("phi3", request)]

    @pytest.mark.asyncio
    async def test_fresh_engine_per_call(
        self, provider: OllamaProvider, engines: EngineRecorder
    ) -> None:
        """Every call should build its own engine."""
        await provider.receive_link_config("caller-a", {})
        ctx = Context(component="caller-a")
        await provider.generate(ctx, GenerationRequest(prompt="one"))
        await provider.generate(ctx, GenerationRequest(prompt="two"))
        assert len(engines.engines) == 2

    @pytest.mark.asyncio
    async def test_upstream_failure_is_data(
        self, provider: OllamaProvider, engines: EngineRecorder
    ) -> None:
        """Model-server failures should come back as an error string."""
        await provider.receive_link_config("caller-a", {})
        engines.error = "model 'llama3' not found"

        result = await provider.generate(
            Context(component="caller-a"), GenerationRequest(prompt="Hello")
        )

        assert result == GenerateResult(
            err="Error generating: model 'llama3' not found"
        )
        assert not result.is_ok

    @pytest.mark.asyncio
    async def test_snapshot_survives_concurrent_unlink(
        self, default_config: ProviderConfig
    ) -> None:
        """An in-flight call should finish after its link is removed."""
        started = asyncio.Event()
        release = asyncio.Event()

        class SlowEngine:
            def __init__(self, host: str, port: int) -> None:
                self.host = host

            async def generate(self, model, request):  # type: ignore[no-untyped-def]
                started.set()
                await release.wait()
                return GenerationResponse(
                    model=model, created_at="now", response="late", done=True
                )

        provider = OllamaProvider(default_config, engine_factory=SlowEngine)
        await provider.receive_link_config("caller-a", {"model_name": "phi3"})

        call = asyncio.create_task(
            provider.generate(
                Context(component="caller-a"), GenerationRequest(prompt="x")
            )
        )
        await started.wait()
        await provider.shutdown()
        release.set()

        result = await call
        assert result.ok is not None
        assert result.ok.model == "phi3"
        assert result.ok.response == "late"


class TestGenerateAgainstOllama:
    """Tests for the default engine factory against a mocked Ollama."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_real_engine_round_trip(self, default_config: ProviderConfig) -> None:
        """The default factory should call the linked server's /api/generate."""
        route = respx.post("http://example.com:9000/api/generate").mock(
            return_value=httpx.Response(200, json=OLLAMA_FINAL_REPLY)
        )
        provider = OllamaProvider(default_config)
        await provider.receive_link_config(
            "caller-b", {"url": "http://example.com:9000"}
        )

        result = await provider.generate(
            Context(component="caller-b"), GenerationRequest(prompt="Hello")
        )

        assert route.called
        assert result.ok is not None
        assert result.ok.eval_count == 3

    @pytest.mark.asyncio
    @respx.mock
    async def test_real_engine_connection_failure(
        self, default_config: ProviderConfig
    ) -> None:
        """A refused connection should be reported inside the result."""
        respx.post("http://localhost:11434/api/generate").mock(
            side_effect=httpx.ConnectError("connection refused")
        )
        provider = OllamaProvider(default_config)
        await provider.receive_link_config("caller-a", {})

        result = await provider.generate(
            Context(component="caller-a"), GenerationRequest(prompt="Hello")
        )

        assert result.ok is None
        assert result.err is not None
        assert result.err.startswith("Error generating:")
        assert "connection refused" in result.err
