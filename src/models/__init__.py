"""Models package exports."""

from src.models.auth import LoginRequest, RegisterRequest, TokenClaims, UpdateUserRequest
from src.models.response import ApiResponse, ErrorResponse, UserStats
from src.models.user import PublicUser, StoredUser, default_avatar_url

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "LoginRequest",
    "PublicUser",
    "RegisterRequest",
    "StoredUser",
    "TokenClaims",
    "UpdateUserRequest",
    "UserStats",
    "default_avatar_url",
]
