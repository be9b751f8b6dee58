"""CLI for running and talking to the Ollama provider."""

import asyncio
import logging
import sys

import click
import httpx

from engines import GenerationRequest
from provider.client import GenerateError, ProviderClient


def _parse_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Turn ``key=value`` arguments into a config mapping."""
    config: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(
                f"expected key=value, got {pair!r}", param_hint="CONFIG"
            )
        config[key] = value
    return config


@click.group()
@click.option(
    "--provider-url",
    default="http://localhost:8080",
    envvar="OLLAMA_EXAMPLE_PROVIDER_URL",
    help="Provider URL",
)
@click.option(
    "--component-id",
    default="cli",
    help="Component identity used for link and generate calls",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
@click.pass_context
def cli(ctx: click.Context, provider_url: str, component_id: str, log_level: str) -> None:
    """Ollama capability provider CLI."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["client"] = ProviderClient(
        provider_url=provider_url,
        component_id=component_id,
    )


@cli.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", default=None, type=int, help="Bind port (default from settings)")
def serve(host: str | None, port: int | None) -> None:
    """Run the provider."""
    import uvicorn

    from provider.config import settings

    uvicorn.run(
        "provider.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=settings.debug,
    )


@cli.command()
@click.argument("config", nargs=-1)
@click.pass_context
def link(ctx: click.Context, config: tuple[str, ...]) -> None:
    """Link this component, e.g. ``link url=http://gpu:11434 model_name=phi3``."""
    client: ProviderClient = ctx.obj["client"]
    try:
        stored = asyncio.run(client.link(_parse_pairs(config)))
    except httpx.HTTPStatusError as e:
        raise click.ClickException(
            f"link rejected ({e.response.status_code}): {e.response.text}"
        ) from e
    except httpx.HTTPError as e:
        raise click.ClickException(f"provider unreachable: {e}") from e

    click.echo(
        f"Linked {stored['source_id']} to {stored['host']}:{stored['port']} "
        f"(model {stored['model']})"
    )


@cli.command()
@click.pass_context
def unlink(ctx: click.Context) -> None:
    """Drop this component's link."""
    client: ProviderClient = ctx.obj["client"]
    try:
        asyncio.run(client.unlink())
    except httpx.HTTPError as e:
        raise click.ClickException(f"unlink failed: {e}") from e
    click.echo(f"Unlinked {client.component_id}")


@cli.command()
@click.argument("prompt")
@click.option(
    "--image",
    "images",
    multiple=True,
    help="Base64-encoded image to send with the prompt",
)
@click.pass_context
def generate(ctx: click.Context, prompt: str, images: tuple[str, ...]) -> None:
    """Send PROMPT through the provider and print the reply."""
    client: ProviderClient = ctx.obj["client"]
    request = GenerationRequest(prompt=prompt, images=list(images) or None)
    try:
        response = asyncio.run(client.generate(request))
    except GenerateError as e:
        raise click.ClickException(str(e)) from e
    except httpx.HTTPStatusError as e:
        raise click.ClickException(
            f"provider returned {e.response.status_code}: {e.response.text}"
        ) from e
    except httpx.HTTPError as e:
        raise click.ClickException(f"provider unreachable: {e}") from e

    click.echo(response.response)


if __name__ == "__main__":
    cli()
