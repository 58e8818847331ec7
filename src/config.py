"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Token signing
    token_secret: str = "your-super-secret-token-key-2025"
    token_ttl_seconds: int = 86400  # 24 hours
    token_scheme: str = "compact"  # "compact" or "jwt"

    # Storage
    users_file: str = "data/users.json"

    # Runtime
    environment: str = "development"
    bcrypt_rounds: int = 10
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000"

    # Route gate
    protected_paths: str = "/users,/dashboard,/profile"
    auth_paths: str = "/login,/register"
    protected_landing: str = "/users"
    login_landing: str = "/login"
    gate_excluded_prefixes: str = "api,static,favicon.ico,docs,redoc,openapi.json"

    @property
    def cookie_secure(self) -> bool:
        """Only send the auth cookie over HTTPS in production."""
        return self.environment.lower() == "production"

    @property
    def protected_paths_list(self) -> List[str]:
        return _split(self.protected_paths)

    @property
    def auth_paths_list(self) -> List[str]:
        return _split(self.auth_paths)

    @property
    def cors_origins_list(self) -> List[str]:
        return _split(self.cors_origins)

    @property
    def gate_excluded_list(self) -> List[str]:
        return _split(self.gate_excluded_prefixes)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
