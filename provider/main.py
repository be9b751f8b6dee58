"""FastAPI application entry point for the Ollama provider."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from provider.config import settings
from provider.metrics import MetricsCollector
from provider.middleware import CallerMiddleware
from provider.router import RouterDependencies, get_deps, init_router, router
from provider.service import OllamaProvider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager.

    Builds the provider from settings on startup and clears its links on
    shutdown.
    """
    provider = OllamaProvider.from_settings(settings)
    metrics = MetricsCollector()
    init_router(RouterDependencies(provider=provider, metrics=metrics))

    default = provider.default_config
    logger.info(
        "Ollama provider ready, default model %s at %s:%s",
        default.model,
        default.host,
        default.port,
    )

    yield

    await provider.shutdown()
    logger.info("Ollama provider exiting")


app = FastAPI(
    title="Ollama Provider",
    description="Links components to Ollama servers and generates text for them",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(CallerMiddleware)
app.include_router(router)


@app.get("/health")
async def health_check() -> dict[str, Any]:
    """Health check endpoint.

    Returns:
        Provider status, linked component count and default model.
    """
    provider = get_deps().provider
    return {
        "status": "healthy",
        "linked_components": len(provider.links),
        "default_model": provider.default_config.model,
    }


@app.get("/metrics")
async def metrics() -> Any:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "provider.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
