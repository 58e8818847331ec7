"""Services package exports."""

from src.services.auth_service import AuthService
from src.services.logging_service import configure_logging, get_logger
from src.services.token_service import JwtTokenCodec, TokenCodec, build_token_codec
from src.services.user_service import UserService
from src.services.user_store import UserStore

__all__ = [
    "AuthService",
    "JwtTokenCodec",
    "TokenCodec",
    "UserService",
    "UserStore",
    "build_token_codec",
    "configure_logging",
    "get_logger",
]
