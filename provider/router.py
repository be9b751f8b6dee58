"""API routes exposing the provider's link lifecycle and generation calls."""

from dataclasses import asdict, dataclass
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from engines import GenerationRequest
from provider.errors import (
    InvalidURLError,
    MissingContextError,
    NotLinkedError,
    ProviderError,
)
from provider.metrics import MetricsCollector
from provider.middleware import get_component_id
from provider.service import Context, OllamaProvider

router = APIRouter()

# Metrics label for calls that arrive without a caller identity
UNKNOWN_COMPONENT = "unknown"


class LinkRequestBody(BaseModel):
    """Link configuration supplied by the host."""

    config: dict[str, str] = Field(default_factory=dict)


class LinkResponse(BaseModel):
    """Configuration stored for a linked component."""

    source_id: str
    model: str
    host: str
    port: int


class GenerateRequestBody(BaseModel):
    """Generation request: a prompt and optional base64 images."""

    prompt: str
    images: list[str] | None = None


@dataclass
class RouterDependencies:
    """Dependencies for router handlers."""

    provider: OllamaProvider
    metrics: MetricsCollector


_deps: RouterDependencies | None = None


def init_router(deps: RouterDependencies) -> None:
    """Initialize router with dependencies.

    Args:
        deps: Router dependencies.
    """
    global _deps
    _deps = deps


def get_deps() -> RouterDependencies:
    """Get router dependencies.

    Returns:
        Router dependencies.

    Raises:
        RuntimeError: If router not initialized.
    """
    if _deps is None:
        raise RuntimeError("Router not initialized. Call init_router first.")
    return _deps


@router.put("/links/{source_id}")
async def put_link(source_id: str, body: LinkRequestBody) -> LinkResponse:
    """Establish or replace the link for a component.

    Raises:
        HTTPException: 400 if the link URL is malformed.
    """
    deps = get_deps()
    try:
        config = await deps.provider.receive_link_config(source_id, body.config)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    deps.metrics.set_linked(len(deps.provider.links))
    return LinkResponse(
        source_id=source_id,
        model=config.model,
        host=config.host,
        port=config.port,
    )


@router.delete("/links/{source_id}")
async def delete_link(source_id: str) -> dict[str, str]:
    """Drop the link for a component. Unknown components are ignored."""
    deps = get_deps()
    await deps.provider.delete_link(source_id)
    deps.metrics.set_linked(len(deps.provider.links))
    return {"status": "removed"}


@router.get("/links")
async def list_links() -> dict[str, Any]:
    """List every linked component and its configuration."""
    deps = get_deps()
    links = await deps.provider.links.linked()
    return {
        "links": {source_id: asdict(config) for source_id, config in links.items()}
    }


@router.post("/shutdown")
async def shutdown() -> dict[str, str]:
    """Clear all link configuration."""
    deps = get_deps()
    await deps.provider.shutdown()
    deps.metrics.set_linked(0)
    return {"status": "shutdown"}


@router.post("/generate")
async def generate(request: Request, body: GenerateRequestBody) -> dict[str, Any]:
    """Generate text for the calling component.

    A model-server failure is not an HTTP error: the reply is 200 with an
    ``err`` field. Transport-level problems map to HTTP errors.

    Args:
        request: FastAPI request.
        body: Generation request body.

    Returns:
        ``{"ok": response}`` or ``{"err": message}``.

    Raises:
        HTTPException: 400 without a caller identity, 404 if not linked.
    """
    deps = get_deps()
    ctx = Context(component=get_component_id(request))
    call_metrics = deps.metrics.start_generate(ctx.component or UNKNOWN_COMPONENT)

    try:
        result = await deps.provider.generate(
            ctx, GenerationRequest(prompt=body.prompt, images=body.images)
        )
        if result.ok is None:
            call_metrics.record_completion(status="error")
            return {"err": result.err}

        call_metrics.record_completion(
            prompt_tokens=result.ok.prompt_eval_count,
            completion_tokens=result.ok.eval_count,
        )
        return {"ok": asdict(result.ok)}
    except ProviderError as e:
        call_metrics.record_completion(status="error")
        raise HTTPException(status_code=_status_for(e), detail=str(e)) from e
    except Exception:
        call_metrics.record_completion(status="error")
        raise
    finally:
        deps.metrics.end_generate(call_metrics)


def _status_for(error: ProviderError) -> int:
    if isinstance(error, MissingContextError):
        return 400
    if isinstance(error, NotLinkedError):
        return 404
    return 500
