"""JSON-file user storage.

The whole collection lives in one JSON array and every mutation rewrites the
file. Mutations run under an asyncio lock so the read-modify-write cycle is
serialized within a process; separate processes sharing the file can still
overwrite each other's changes.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog
from pydantic import ValidationError as PydanticValidationError

from src.models.user import StoredUser
from src.services.errors import StorageError

logger = structlog.get_logger(__name__)


class UserStore:
    """Whole-collection persistence for user records."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # File access (blocking; run in a worker thread)
    # ------------------------------------------------------------------

    def _read(self) -> List[StoredUser]:
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("users_file_unreadable", path=str(self.path), error=str(e))
            raise StorageError() from e

        if not isinstance(data, list):
            logger.error("users_file_malformed", path=str(self.path))
            raise StorageError()

        try:
            return [StoredUser.model_validate(item) for item in data]
        except PydanticValidationError as e:
            logger.error("users_file_malformed", path=str(self.path), error=str(e))
            raise StorageError() from e

    def _write(self, users: List[StoredUser]) -> None:
        """Write the collection atomically (temp file + replace)."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                delete=False,
                encoding="utf-8",
            ) as tf:
                json.dump(
                    [u.model_dump(mode="json") for u in users],
                    tf,
                    indent=2,
                    ensure_ascii=False,
                )
                temp_path = Path(tf.name)
        except OSError as e:
            logger.error("users_file_write_failed", path=str(self.path), error=str(e))
            raise StorageError() from e

        try:
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            logger.error("users_file_write_failed", path=str(self.path), error=str(e))
            raise StorageError() from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def load_all(self) -> List[StoredUser]:
        """Load every user record (empty list when the file is absent)."""
        return await asyncio.to_thread(self._read)

    async def save_all(self, users: List[StoredUser]) -> None:
        """Replace the whole collection."""
        async with self._lock:
            await asyncio.to_thread(self._write, users)

    async def find_by_email(self, email: str) -> Optional[StoredUser]:
        """Find a user by email (case-insensitive)."""
        wanted = email.strip().lower()
        for user in await self.load_all():
            if user.email.lower() == wanted:
                return user
        return None

    async def find_by_id(self, user_id: int) -> Optional[StoredUser]:
        for user in await self.load_all():
            if user.id == user_id:
                return user
        return None

    @staticmethod
    def next_id(users: List[StoredUser]) -> int:
        """Next sequential id: one past the highest existing id, or 1."""
        if not users:
            return 1
        return max(u.id for u in users) + 1

    # ------------------------------------------------------------------
    # Mutations (serialized)
    # ------------------------------------------------------------------

    async def insert(
        self, build: Callable[[List[StoredUser]], StoredUser]
    ) -> StoredUser:
        """Append a new record built from the current collection.

        ``build`` receives the freshly loaded collection inside the lock, so
        uniqueness checks and id assignment see every committed write. It
        may raise to abort the insert.
        """
        async with self._lock:
            users = await asyncio.to_thread(self._read)
            user = build(users)
            users.append(user)
            await asyncio.to_thread(self._write, users)

        logger.debug("user_record_inserted", user_id=user.id, total=len(users))
        return user

    async def update(
        self, user_id: int, changes: Dict[str, Any]
    ) -> Optional[StoredUser]:
        """Apply field changes to one record.

        Returns:
            The updated record, or None if no record has that id
        """
        async with self._lock:
            users = await asyncio.to_thread(self._read)
            for i, user in enumerate(users):
                if user.id == user_id:
                    updated = user.model_copy(update=changes)
                    users[i] = updated
                    await asyncio.to_thread(self._write, users)
                    return updated
        return None

    async def delete(self, user_id: int) -> Optional[Tuple[StoredUser, int]]:
        """Remove one record.

        Returns:
            Tuple of (deleted record, remaining count), or None if not found
        """
        async with self._lock:
            users = await asyncio.to_thread(self._read)
            target = next((u for u in users if u.id == user_id), None)
            if target is None:
                return None
            remaining = [u for u in users if u.id != user_id]
            await asyncio.to_thread(self._write, remaining)

        return target, len(remaining)
