"""Exceptions raised by the provider."""


class ProviderError(Exception):
    """Base class for provider errors."""

    pass


class InvalidURLError(ProviderError):
    """Raised when a configured URL cannot be turned into a host and port."""

    pass


class NotLinkedError(ProviderError):
    """Raised when a component has no link configuration."""

    def __init__(self, component_id: str) -> None:
        super().__init__(f"component is not linked: {component_id}")
        self.component_id = component_id


class MissingContextError(ProviderError):
    """Raised when a generation call does not identify its caller."""

    pass
