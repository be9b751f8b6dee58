"""HTTP example: forwards the request body as a prompt and replies with the text."""

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from engines import GenerationRequest
from provider.client import ProviderClient
from example.config import settings

HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

app = FastAPI(
    title="Ollama HTTP Example",
    description="Turns an HTTP body into a prompt for the Ollama provider",
    version="0.1.0",
)

app.state.provider_client = ProviderClient(
    provider_url=settings.provider_url,
    component_id=settings.component_id,
    timeout=settings.timeout,
)


@app.api_route("/{path:path}", methods=HTTP_METHODS, include_in_schema=False)
async def handle(request: Request, path: str) -> PlainTextResponse:
    """Generate text from the whole request body.

    Any failure (a body that is not UTF-8, a provider error, a failed
    generation) is left unhandled and fails the request.
    """
    body = await request.body()
    prompt = body.decode("utf-8")

    client: ProviderClient = request.app.state.provider_client
    response = await client.generate(GenerationRequest(prompt=prompt, images=None))

    return PlainTextResponse(response.response, status_code=200)


def run() -> None:
    """Serve the example with uvicorn using ``OLLAMA_EXAMPLE_`` settings."""
    import uvicorn

    uvicorn.run(
        "example.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
