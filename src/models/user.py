"""User models."""

from datetime import datetime
from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

AVATAR_BASE_URL = "https://ui-avatars.com/api/"


def default_avatar_url(first_name: str, last_name: str) -> str:
    """Build the generated avatar URL for a user's name."""
    name = f"{quote(first_name, safe='')}+{quote(last_name, safe='')}"
    return f"{AVATAR_BASE_URL}?name={name}&background=6366f1&color=fff"


class PublicUser(BaseModel):
    """A user as returned to clients (never carries the password hash)."""

    id: int = Field(ge=1)
    email: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    def with_default_avatar(self) -> "PublicUser":
        """Return a copy whose avatar falls back to the generated one."""
        if self.avatar:
            return self
        return self.model_copy(
            update={"avatar": default_avatar_url(self.first_name, self.last_name)}
        )


class StoredUser(PublicUser):
    """A user record as persisted in the users file."""

    password: str

    def to_public(self) -> PublicUser:
        return PublicUser(**self.model_dump(exclude={"password"}))
