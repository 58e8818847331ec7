"""Unit tests for Pydantic models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from src.models.auth import TokenClaims
from src.models.response import ErrorResponse
from src.models.user import PublicUser, StoredUser, default_avatar_url


def _stored(**overrides):
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    fields = dict(
        id=1,
        email="alice@example.com",
        first_name="Alice",
        last_name="Smith",
        password="$2b$04$hash",
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    return StoredUser(**fields)


class TestAvatarUrl:
    """Tests for default_avatar_url."""

    def test_simple_name(self):
        assert default_avatar_url("Alice", "Smith") == (
            "https://ui-avatars.com/api/?name=Alice+Smith&background=6366f1&color=fff"
        )

    def test_escapes_name_parts(self):
        url = default_avatar_url("Jean Luc", "D'Arc&Co")
        assert "name=Jean%20Luc+D%27Arc%26Co&" in url


class TestUserModels:
    """Tests for StoredUser and PublicUser."""

    def test_to_public_drops_password(self):
        public = _stored().to_public()

        assert isinstance(public, PublicUser)
        assert "password" not in public.model_dump()
        assert public.email == "alice@example.com"

    def test_with_default_avatar_fills_missing(self):
        public = _stored().to_public().with_default_avatar()
        assert public.avatar == default_avatar_url("Alice", "Smith")

    def test_with_default_avatar_keeps_existing(self):
        public = _stored(avatar="https://cdn.example.com/a.png").to_public()
        assert public.with_default_avatar().avatar == "https://cdn.example.com/a.png"

    def test_rejects_non_positive_id(self):
        with pytest.raises(ValidationError):
            _stored(id=0)

    def test_stored_requires_password(self):
        with pytest.raises(ValidationError):
            StoredUser(
                id=1,
                email="alice@example.com",
                first_name="Alice",
                last_name="Smith",
                created_at=datetime.now(timezone.utc),
                updated_at=datetime.now(timezone.utc),
            )


class TestTokenClaims:
    """Tests for TokenClaims validation."""

    def test_valid_claims(self):
        claims = TokenClaims(
            userId=3,
            email="a@example.com",
            firstName="A",
            lastName="B",
            timestamp=1_700_000_000_000,
        )
        assert claims.userId == 3

    def test_extra_claims_allowed(self):
        claims = TokenClaims(
            userId=3, email="a@example.com", firstName="A", lastName="B", role="x"
        )
        assert claims.model_dump()["role"] == "x"

    def test_missing_user_id(self):
        with pytest.raises(ValidationError):
            TokenClaims(email="a@example.com", firstName="A", lastName="B")


class TestErrorResponse:
    """Tests for ErrorResponse serialization."""

    def test_success_is_false(self):
        body = ErrorResponse(error="not_found", detail="User not found")
        dumped = body.model_dump(exclude_none=True)
        assert dumped == {"success": False, "error": "not_found", "detail": "User not found"}
