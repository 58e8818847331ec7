"""Authentication service: registration, login and token verification."""

import re
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import bcrypt
import structlog
from pydantic import ValidationError as PydanticValidationError

from src.config import Settings
from src.models.auth import TokenClaims
from src.models.user import PublicUser, StoredUser, default_avatar_url
from src.services.errors import ConflictError, InvalidCredentials, ValidationError
from src.services.user_store import UserStore

logger = structlog.get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
# bcrypt only accepts secrets up to 72 bytes
MAX_PASSWORD_BYTES = 72


def is_valid_email(email: str) -> bool:
    """Check the simple ``local@domain.tld`` shape."""
    return bool(EMAIL_PATTERN.match(email))


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


class AuthService:
    """Service for password hashing, registration and token issuance."""

    def __init__(self, settings: Settings, store: UserStore, codec):
        self.settings = settings
        self.store = store
        self.codec = codec

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain-text password to hash

        Returns:
            Bcrypt hash string
        """
        salt = bcrypt.gensalt(rounds=self.settings.bcrypt_rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a password against a bcrypt hash.

        A malformed stored hash never matches, and neither does a password
        longer than bcrypt can hash.
        """
        if password_too_long(password):
            return False
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except ValueError:
            logger.warning("password_hash_malformed")
            return False

    async def register(
        self,
        first_name: Optional[str],
        last_name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> PublicUser:
        """Create a new account.

        Args:
            first_name: Given name
            last_name: Family name
            email: Email address (case-insensitively unique)
            password: Plain-text password (min 6 chars)

        Returns:
            The created user without its password hash

        Raises:
            ValidationError: If any field is missing or malformed
            ConflictError: If the email is already registered
        """
        errors: Dict[str, str] = {}
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        email = (email or "").strip()

        if not first_name:
            errors["firstName"] = "First name is required"
        if not last_name:
            errors["lastName"] = "Last name is required"
        if not email:
            errors["email"] = "Email is required"
        elif not is_valid_email(email):
            errors["email"] = "Email address is not valid"
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            errors["password"] = (
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        elif password_too_long(password):
            errors["password"] = (
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
            )

        if errors:
            logger.info("registration_rejected", fields=sorted(errors))
            raise ValidationError(errors)

        normalized_email = email.lower()
        password_hash = self.hash_password(password)

        def build(users: List[StoredUser]) -> StoredUser:
            if any(u.email.lower() == normalized_email for u in users):
                raise ConflictError(errors={"email": "Email is already registered"})
            now = datetime.now(timezone.utc)
            return StoredUser(
                id=self.store.next_id(users),
                email=normalized_email,
                first_name=first_name,
                last_name=last_name,
                password=password_hash,
                avatar=default_avatar_url(first_name, last_name),
                created_at=now,
                updated_at=now,
            )

        try:
            user = await self.store.insert(build)
        except ConflictError:
            logger.info("registration_conflict", email=normalized_email)
            raise

        logger.info("user_registered", user_id=user.id, email=user.email)
        return user.to_public()

    async def login(
        self, email: Optional[str], password: Optional[str]
    ) -> Tuple[str, PublicUser]:
        """Check credentials and issue a token.

        Returns:
            Tuple of (token, user without password hash)

        Raises:
            ValidationError: If email is empty/malformed or password is empty
            InvalidCredentials: If the email is unknown or the password is wrong
        """
        errors: Dict[str, str] = {}
        email = (email or "").strip()

        if not email:
            errors["email"] = "Email is required"
        elif not is_valid_email(email):
            errors["email"] = "Email address is not valid"
        if not password:
            errors["password"] = "Password is required"

        if errors:
            raise ValidationError(errors)

        user = await self.store.find_by_email(email)
        if user is None:
            logger.info("login_failed", reason="unknown_email")
            raise InvalidCredentials("unknown_email")

        if password_too_long(password):
            logger.info("login_failed", reason="password_too_long", user_id=user.id)
            raise InvalidCredentials("password_too_long")

        if not self.verify_password(password, user.password):
            logger.info("login_failed", reason="password_mismatch", user_id=user.id)
            raise InvalidCredentials("password_mismatch")

        token = self.codec.encode(
            {
                "userId": user.id,
                "email": user.email,
                "firstName": user.first_name,
                "lastName": user.last_name,
            }
        )

        logger.info("user_logged_in", user_id=user.id)
        return token, user.to_public()

    def verify_token(self, token: Optional[str]) -> Optional[TokenClaims]:
        """Decode a token into typed claims, or None if it is not valid."""
        if not token:
            return None
        payload = self.codec.decode(token)
        if payload is None:
            return None
        try:
            return TokenClaims.model_validate(payload)
        except PydanticValidationError:
            logger.warning("token_claims_malformed")
            return None

    async def authenticate(self, token: Optional[str]) -> Optional[PublicUser]:
        """Resolve a token to the current stored user.

        The claims only identify the user; the returned record is always
        re-read from storage, so deleted accounts stop authenticating.
        """
        claims = self.verify_token(token)
        if claims is None:
            return None

        user = await self.store.find_by_id(claims.userId)
        if user is None:
            logger.info("token_user_missing", user_id=claims.userId)
            return None

        return user.to_public().with_default_avatar()
