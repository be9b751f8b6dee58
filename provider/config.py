"""Provider configuration using pydantic-settings."""

import ipaddress
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from urllib.parse import urlsplit

from pydantic_settings import BaseSettings, SettingsConfigDict

from provider.errors import InvalidURLError

logger = logging.getLogger(__name__)

MODEL_NAME_KEY = "model_name"
URL_KEY = "url"
HOST_KEY = "host"

DEFAULT_MODEL = "llama3"
DEFAULT_URL = "http://localhost:11434"
DEFAULT_HOST = "http://localhost"
DEFAULT_PORT = 11434

# Ports assumed when a URL does not carry one
KNOWN_DEFAULT_PORTS = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
}

# Characters allowed in a registered host name once IDNA-encoded
HOSTNAME_PATTERN = re.compile(r"^[a-z0-9._~-]+$")


class Settings(BaseSettings):
    """Provider settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="OLLAMA_PROVIDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: str = "INFO"

    # Ollama defaults, overridable per link
    model_name: str = DEFAULT_MODEL
    url: str = DEFAULT_URL
    ollama_timeout: float | None = 120.0


def get_host_and_port(raw: str) -> tuple[str, int]:
    """Split a URL into ``scheme://hostname`` and a port.

    Args:
        raw: URL such as ``http://localhost:11434``.

    Returns:
        Tuple of scheme plus hostname, and the port.

    Raises:
        InvalidURLError: If the URL is not absolute, has no host or no
            port can be determined.
    """
    try:
        parts = urlsplit(raw.strip())
        explicit_port = parts.port
    except ValueError as e:
        raise InvalidURLError(f"Invalid host URL: {e}") from e

    if not parts.scheme or not parts.netloc:
        raise InvalidURLError(f"Invalid host URL: {raw!r}")
    if not parts.hostname:
        raise InvalidURLError("Given URL didn't have a host set")

    scheme = parts.scheme.lower()
    port = explicit_port if explicit_port is not None else KNOWN_DEFAULT_PORTS.get(scheme)
    if not port:
        raise InvalidURLError("Unable to ascertain port from host URL")

    host = _validate_hostname(parts.hostname, bracketed="[" in parts.netloc)
    return f"{scheme}://{host}", port


def _validate_hostname(hostname: str, bracketed: bool = False) -> str:
    """Check a host name or IP literal and return it ready for a URL.

    Raises:
        InvalidURLError: If the host contains characters a host cannot hold.
    """
    if bracketed or ":" in hostname:
        try:
            ipaddress.IPv6Address(hostname)
        except ValueError as e:
            raise InvalidURLError(f"Invalid host URL: {e}") from e
        return f"[{hostname}]"

    try:
        encoded = hostname.encode("idna").decode("ascii")
    except UnicodeError as e:
        raise InvalidURLError(f"Invalid host URL: bad host {hostname!r}") from e
    if not HOSTNAME_PATTERN.match(encoded):
        raise InvalidURLError(f"Invalid host URL: bad host {hostname!r}")
    return encoded


def _normalize_keys(config: Mapping[str, str]) -> dict[str, str]:
    return {key.lower(): value for key, value in config.items()}


@dataclass(frozen=True)
class ProviderConfig:
    """Connection settings for one linked component."""

    model: str
    host: str
    port: int

    def merge(self, config: Mapping[str, str]) -> "ProviderConfig":
        """Return a copy with the supplied link fields applied.

        Supplied fields win; absent fields keep this config's values. The
        ``url`` key (or ``host``) is parsed into host and port.

        Args:
            config: Link configuration, keys matched case-insensitively.

        Returns:
            The merged configuration.

        Raises:
            InvalidURLError: If the supplied URL cannot be parsed.
        """
        fields = _normalize_keys(config)
        raw_url = fields.get(URL_KEY, fields.get(HOST_KEY))

        host, port = self.host, self.port
        if raw_url is not None:
            host, port = get_host_and_port(raw_url)

        return replace(
            self,
            model=fields.get(MODEL_NAME_KEY, self.model),
            host=host,
            port=port,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderConfig":
        """Build the process-wide default configuration.

        A malformed URL does not stop startup; it is logged and the built-in
        ``http://localhost:11434`` is used instead.

        Args:
            settings: Loaded provider settings.

        Returns:
            Default configuration for links that carry no settings.
        """
        try:
            host, port = get_host_and_port(settings.url)
        except InvalidURLError as e:
            logger.warning(
                "Invalid host in config %r (%s), falling back to %s",
                settings.url,
                e,
                DEFAULT_URL,
            )
            host, port = DEFAULT_HOST, DEFAULT_PORT
        return cls(model=settings.model_name, host=host, port=port)


settings = Settings()
