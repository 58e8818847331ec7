"""FastAPI dependencies for services and authentication."""

from fastapi import Depends, Request

from src.api.middleware import AUTH_COOKIE_NAME
from src.config import Settings
from src.models.user import PublicUser
from src.services.auth_service import AuthService
from src.services.errors import AuthenticationRequired
from src.services.logging_service import bind_user_context
from src.services.user_service import UserService
from src.services.user_store import UserStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_token_codec(request: Request):
    return request.app.state.token_codec


def get_auth_service(
    settings: Settings = Depends(get_app_settings),
    store: UserStore = Depends(get_user_store),
    codec=Depends(get_token_codec),
) -> AuthService:
    return AuthService(settings, store, codec)


def get_user_service(store: UserStore = Depends(get_user_store)) -> UserService:
    return UserService(store)


async def get_current_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> PublicUser:
    """Resolve the signed-in user from the ``auth-token`` cookie.

    Returns:
        The authoritative stored user

    Raises:
        AuthenticationRequired: If the cookie is missing, invalid, expired,
            or names a user that no longer exists
    """
    token = request.cookies.get(AUTH_COOKIE_NAME)
    user = await auth_service.authenticate(token)
    if user is None:
        raise AuthenticationRequired()
    bind_user_context(user.id)
    return user
