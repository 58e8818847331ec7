"""User management service."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import structlog

from src.models.response import UserStats
from src.models.user import PublicUser
from src.services.errors import NotFoundError, ValidationError
from src.services.user_store import UserStore

logger = structlog.get_logger(__name__)


def parse_user_id(raw: str) -> int:
    """Convert a path segment into a user id.

    Raises:
        ValidationError: If the value is not a positive integer
    """
    try:
        user_id = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({"id": "User id must be a number"}, "Invalid user id")
    if user_id < 1:
        raise ValidationError({"id": "User id must be positive"}, "Invalid user id")
    return user_id


class UserService:
    """Service for user CRUD operations."""

    def __init__(self, store: UserStore):
        self.store = store

    async def list_users(self) -> List[PublicUser]:
        """Return all users without password hashes.

        Users without an avatar get the generated one.
        """
        users = await self.store.load_all()
        return [u.to_public().with_default_avatar() for u in users]

    async def get_user(self, user_id: int) -> PublicUser:
        user = await self.store.find_by_id(user_id)
        if user is None:
            raise NotFoundError()
        return user.to_public().with_default_avatar()

    async def update_user(
        self,
        user_id: int,
        first_name: Optional[str],
        last_name: Optional[str],
        avatar: Optional[str] = None,
    ) -> PublicUser:
        """Update a user's name and avatar.

        Email cannot be changed after creation.

        Args:
            user_id: Id of the user to update
            first_name: New first name (required)
            last_name: New last name (required)
            avatar: New avatar URL; the current one is kept when empty

        Returns:
            Updated user

        Raises:
            ValidationError: If either name is missing
            NotFoundError: If no user has that id
        """
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()

        errors: Dict[str, str] = {}
        if not first_name:
            errors["first_name"] = "First name is required"
        if not last_name:
            errors["last_name"] = "Last name is required"
        if errors:
            raise ValidationError(errors, "First and last name are required")

        changes: Dict[str, Any] = {
            "first_name": first_name,
            "last_name": last_name,
            "updated_at": datetime.now(timezone.utc),
        }
        if avatar:
            changes["avatar"] = avatar

        updated = await self.store.update(user_id, changes)
        if updated is None:
            raise NotFoundError()

        logger.info(
            "user_updated",
            user_id=user_id,
            fields_updated=sorted(k for k in changes if k != "updated_at"),
        )
        return updated.to_public().with_default_avatar()

    async def delete_user(self, user_id: int) -> Tuple[PublicUser, int]:
        """Delete a user.

        Returns:
            Tuple of (deleted user, number of users remaining)

        Raises:
            NotFoundError: If no user has that id
        """
        result = await self.store.delete(user_id)
        if result is None:
            logger.warning("user_delete_not_found", user_id=user_id)
            raise NotFoundError()

        deleted, remaining = result
        logger.info("user_deleted", user_id=user_id, remaining=remaining)
        return deleted.to_public(), remaining

    async def stats(self) -> UserStats:
        """Count users, explicit avatars, plausible emails and complete names."""
        users = await self.store.load_all()
        return UserStats(
            total=len(users),
            withAvatar=sum(1 for u in users if u.avatar),
            validEmails=sum(1 for u in users if "@" in u.email),
            completeProfiles=sum(1 for u in users if u.first_name and u.last_name),
        )
