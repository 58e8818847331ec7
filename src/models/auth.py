"""Auth and user-management request models.

Fields are optional at the schema level; the services perform the
field-level validation so that every problem is reported at once as a
field -> message mapping.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Self-registration form.

    Attributes:
        firstName: Given name (required, trimmed)
        lastName: Family name (required, trimmed)
        email: Email address, stored lower-cased
        password: Plain-text password (min 6 chars)
    """

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Login credentials."""

    email: Optional[str] = None
    password: Optional[str] = None


class UpdateUserRequest(BaseModel):
    """Request to update a user's profile.

    Email is accepted for form compatibility but is immutable and ignored.

    Attributes:
        first_name: New first name (required)
        last_name: New last name (required)
        avatar: New avatar URL; the current one is kept when omitted
        email: Ignored
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    email: Optional[str] = None


class TokenClaims(BaseModel):
    """Claims embedded in an auth token at login.

    The values are a snapshot of the user record at issuance time.
    """

    model_config = ConfigDict(extra="allow")

    userId: int = Field(ge=1)
    email: str
    firstName: str
    lastName: str
    timestamp: Optional[int] = None
    iat: Optional[int] = None
    exp: Optional[int] = None
