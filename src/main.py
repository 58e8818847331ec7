"""FastAPI application initialization."""

from contextlib import asynccontextmanager
from typing import Optional
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.auth import router as auth_router
from src.api.middleware import CorrelationIdMiddleware, RouteGateMiddleware
from src.api.pages import router as pages_router
from src.api.users import router as users_router
from src.config import Settings, get_settings
from src.models.response import ErrorResponse
from src.services.errors import AppError
from src.services.logging_service import configure_logging, get_logger
from src.services.token_service import build_token_codec
from src.services.user_store import UserStore


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or str(uuid4())


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    detail: str,
    errors: Optional[dict] = None,
) -> JSONResponse:
    correlation_id = _correlation_id(request)
    body = ErrorResponse(
        error=error,
        detail=detail,
        errors=errors,
        correlation_id=correlation_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers={"X-Correlation-Id": correlation_id},
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Convert service errors into JSON error responses.

    Server-side failures are reported generically; their cause is logged.
    """
    logger = structlog.get_logger()
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            error=exc.error,
            cause=repr(exc.__cause__) if exc.__cause__ else None,
        )
        return _error_response(
            request, exc.status_code, exc.error, "Internal server error"
        )

    logger.info(
        "request_rejected",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.error,
    )
    return _error_response(
        request, exc.status_code, exc.error, exc.message, exc.errors
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle malformed request bodies with 400 and a field map."""
    errors = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", []) if part != "body"]
        field = ".".join(loc) or "body"
        errors.setdefault(field, err.get("msg", "Invalid value"))

    structlog.get_logger().warning(
        "validation_error",
        path=request.url.path,
        fields=sorted(errors),
    )
    return _error_response(
        request, 400, "validation_error", "Request validation failed", errors
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the exception, return a generic 500."""
    structlog.get_logger().error(
        "unhandled_exception",
        path=request.url.path,
        exc_info=exc,
    )
    return _error_response(request, 500, "internal_error", "Internal server error")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use; defaults to the environment-derived ones

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    codec = build_token_codec(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown events."""
        configure_logging(settings.log_level)
        logger = get_logger("main")
        logger.info(
            "application_started",
            users_file=settings.users_file,
            scheme=settings.token_scheme,
            environment=settings.environment,
        )

        yield

        logger.info("application_shutdown")

    app = FastAPI(
        title="User Account Portal",
        description="Registration, login and user management backed by a JSON file",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.token_codec = codec
    app.state.user_store = UserStore(settings.users_file)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Route gate for browser navigation (API and static paths are skipped)
    app.add_middleware(RouteGateMiddleware, settings=settings, codec=codec)

    # CORS middleware for browser clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Correlation ID middleware for request tracking and observability
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(pages_router)

    @app.get("/api/health", tags=["Health"])
    async def health_check() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
