"""Middleware for request processing, observability and route gating."""

from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from src.api.route_gate import decide
from src.config import Settings

AUTH_COOKIE_NAME = "auth-token"

logger = structlog.get_logger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with a correlation id and request fields for logging.

    The id comes from the X-Correlation-Id header or a fresh UUID4. It is
    stored on ``request.state`` and echoed back in the response header. The
    structlog context is reset per request so a ``user_id`` bound by the
    auth dependency never carries over to another request.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = request.headers.get("X-Correlation-Id") or str(uuid4())
        request.state.correlation_id = correlation_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)

        response.headers["X-Correlation-Id"] = correlation_id
        return response


class RouteGateMiddleware(BaseHTTPMiddleware):
    """Redirect browser navigation based on path and auth cookie.

    Anonymous visitors are sent to the login page from "/" and from
    protected pages; signed-in visitors are sent to the protected landing
    page from "/" and from the login/register forms. API routes and static
    assets pass through untouched.
    """

    def __init__(self, app: ASGIApp, settings: Settings, codec):
        super().__init__(app)
        self.settings = settings
        self.codec = codec

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        token = request.cookies.get(AUTH_COOKIE_NAME)
        decision = decide(request.url.path, token, self.codec, self.settings)

        if decision.is_redirect:
            target = request.url.replace(path=decision.location, query="", fragment="")
            logger.debug(
                "route_gate_redirect",
                path=request.url.path,
                path_class=decision.path_class.value,
                authenticated=decision.authenticated,
                location=decision.location,
            )
            return RedirectResponse(str(target))

        return await call_next(request)
