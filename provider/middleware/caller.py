"""Caller identity extraction middleware."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

COMPONENT_HEADER = "X-Component-ID"


class CallerMiddleware(BaseHTTPMiddleware):
    """Middleware to extract the calling component from request headers.

    Stores the X-Component-ID header in request.state. A request without the
    header carries no context; there is no default identity.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Extract the component ID and add it to request state.

        Args:
            request: The incoming request.
            call_next: The next middleware or route handler.

        Returns:
            The response from downstream handlers.
        """
        request.state.component_id = request.headers.get(COMPONENT_HEADER)
        return await call_next(request)


def get_component_id(request: Request) -> str | None:
    """Get the calling component from request state."""
    return getattr(request.state, "component_id", None)
