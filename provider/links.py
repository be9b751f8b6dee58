"""Link bookkeeping: which component talks to which Ollama server."""

import asyncio
import logging
from collections.abc import Mapping

from provider.config import ProviderConfig
from provider.errors import NotLinkedError

logger = logging.getLogger(__name__)


class LinkManager:
    """Maps component identities to their connection configuration.

    All reads and writes go through a single lock, so each update for an
    identity is atomic with respect to lookups of that identity. Callers get
    immutable ``ProviderConfig`` values and may keep them after the lock is
    released.
    """

    def __init__(self, default_config: ProviderConfig) -> None:
        """Initialize an empty link map.

        Args:
            default_config: Base for merges and the value stored for links
                established without configuration.
        """
        self.default_config = default_config
        self._links: dict[str, ProviderConfig] = {}
        self._lock = asyncio.Lock()

    async def establish(
        self, component_id: str, config: Mapping[str, str]
    ) -> ProviderConfig:
        """Store configuration for a newly linked component.

        Args:
            component_id: Identity of the linked component.
            config: Link fields, merged over the default configuration.

        Returns:
            The stored configuration.

        Raises:
            InvalidURLError: If the link URL is malformed. Nothing is stored.
        """
        resolved = (
            self.default_config
            if not config
            else self.default_config.merge(config)
        )
        async with self._lock:
            self._links[component_id] = resolved
        logger.info(
            "Linked component %s to %s:%s (model %s)",
            component_id,
            resolved.host,
            resolved.port,
            resolved.model,
        )
        return resolved

    async def remove(self, component_id: str) -> None:
        """Forget a component. Unknown identities are ignored."""
        async with self._lock:
            self._links.pop(component_id, None)

    async def clear(self) -> None:
        """Forget every component."""
        async with self._lock:
            self._links.clear()

    async def lookup(self, component_id: str) -> ProviderConfig:
        """Return the configuration for a component.

        Raises:
            NotLinkedError: If the component has no link.
        """
        async with self._lock:
            config = self._links.get(component_id)
        if config is None:
            raise NotLinkedError(component_id)
        return config

    async def linked(self) -> dict[str, ProviderConfig]:
        """Snapshot of every linked component."""
        async with self._lock:
            return dict(self._links)

    def __len__(self) -> int:
        return len(self._links)
