"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Response, status
import structlog

from src.api.dependencies import (
    get_app_settings,
    get_auth_service,
    get_current_user,
    get_user_service,
)
from src.api.middleware import AUTH_COOKIE_NAME
from src.config import Settings
from src.models.auth import LoginRequest, RegisterRequest
from src.models.response import ApiResponse
from src.models.user import PublicUser
from src.services.auth_service import AuthService
from src.services.user_service import UserService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    """Attach the auth token cookie (HTTP-only, SameSite=Strict)."""
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.token_ttl_seconds,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="strict",
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    """Expire the auth token cookie immediately."""
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value="",
        max_age=0,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="strict",
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> ApiResponse:
    """Register a new account.

    Raises:
        ValidationError (400): If a field is missing or malformed
        ConflictError (409): If the email is already registered
    """
    user = await auth_service.register(
        first_name=request.firstName,
        last_name=request.lastName,
        email=request.email,
        password=request.password,
    )
    return ApiResponse(message="Registration successful", data={"user": user})


@router.get("/register")
async def list_registered_users(
    current_user: PublicUser = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> ApiResponse:
    """List registered users without password hashes, with a total count."""
    users = await user_service.list_users()
    return ApiResponse(data={"users": users, "total": len(users)})


@router.post("/login")
async def login(
    request: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse:
    """Log in with email and password.

    The token is returned in the body and set as the ``auth-token`` cookie.

    Raises:
        ValidationError (400): If email is malformed or password empty
        InvalidCredentials (401): If the email or password is wrong
    """
    token, user = await auth_service.login(request.email, request.password)
    set_auth_cookie(response, token, settings)
    return ApiResponse(message="Login successful", data={"user": user, "token": token})


@router.post("/logout")
async def logout(
    response: Response,
    settings: Settings = Depends(get_app_settings),
) -> ApiResponse:
    """Clear the auth cookie.

    Tokens are not tracked server-side, so an already issued token stays
    valid until it expires.
    """
    clear_auth_cookie(response, settings)
    logger.info("user_logged_out")
    return ApiResponse(message="Logout successful")


@router.get("/me")
async def get_me(current_user: PublicUser = Depends(get_current_user)) -> ApiResponse:
    """Return the signed-in user as currently stored."""
    return ApiResponse(data={"user": current_user})
