"""Request middleware for the provider transport."""

from provider.middleware.caller import (
    COMPONENT_HEADER,
    CallerMiddleware,
    get_component_id,
)

__all__ = ["COMPONENT_HEADER", "CallerMiddleware", "get_component_id"]
