"""Signed auth tokens carried in the ``auth-token`` cookie.

Two interchangeable schemes share one contract:

- ``TokenCodec`` (default): ``<payload>.<signature>`` where payload is the
  base64url JSON of the claims plus a ``timestamp`` in milliseconds and
  signature is the base64url HMAC-SHA256 of the payload segment.
- ``JwtTokenCodec``: a standard HS256 JWT with ``iat``/``exp`` in seconds.

``encode`` never validates claim contents. ``decode`` never raises; any
malformed, tampered or expired token yields ``None``.
"""

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any, Callable, Mapping, Optional

import jwt
import structlog

from src.config import Settings

logger = structlog.get_logger(__name__)

SEPARATOR = "."
JWT_ALGORITHM = "HS256"

Clock = Callable[[], float]


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


class TokenCodec:
    """Compact two-part token with a millisecond issuance timestamp."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 86400,
        clock: Optional[Clock] = None,
    ):
        self._key = secret.encode("utf-8")
        self.ttl_ms = ttl_seconds * 1000
        self._clock = clock or time.time

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _sign(self, payload_segment: str) -> str:
        digest = hmac.new(
            self._key, payload_segment.encode("ascii"), hashlib.sha256
        ).digest()
        return _b64url_encode(digest)

    def encode(self, claims: Mapping[str, Any]) -> str:
        """Sign a claims mapping, stamping it with the current time.

        Args:
            claims: Small mapping of JSON-serializable values

        Returns:
            Token string ``<payload>.<signature>``
        """
        data = dict(claims)
        data["timestamp"] = self._now_ms()
        serialized = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
        payload_segment = _b64url_encode(serialized.encode("utf-8"))
        return f"{payload_segment}{SEPARATOR}{self._sign(payload_segment)}"

    def decode(self, token: Any) -> Optional[dict]:
        """Verify a token and return its claims, or None if it is not valid."""
        if not isinstance(token, str):
            return None

        parts = token.split(SEPARATOR)
        if len(parts) != 2:
            return None
        payload_segment, signature = parts

        try:
            expected = self._sign(payload_segment)
        except UnicodeEncodeError:
            return None
        if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
            return None

        try:
            claims = json.loads(_b64url_decode(payload_segment).decode("utf-8"))
        except (binascii.Error, ValueError):
            logger.debug("token_payload_unreadable")
            return None

        if not isinstance(claims, dict):
            return None

        issued_at = claims.get("timestamp")
        if isinstance(issued_at, bool) or not isinstance(issued_at, (int, float)):
            return None

        # A token aged exactly the TTL is still accepted.
        if self._now_ms() - issued_at > self.ttl_ms:
            logger.debug("token_expired", issued_at=issued_at)
            return None

        return claims


class JwtTokenCodec:
    """HS256 JWT with ``iat``/``exp`` claims, checked against the codec clock."""

    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 86400,
        clock: Optional[Clock] = None,
    ):
        self._secret = secret
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.time

    def encode(self, claims: Mapping[str, Any]) -> str:
        now = int(self._clock())
        payload = {
            **claims,
            "iat": now,
            "exp": now + self.ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: Any) -> Optional[dict]:
        if not isinstance(token, str):
            return None

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={
                    "require": ["iat", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as e:
            logger.debug("jwt_rejected", reason=str(e))
            return None

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp < int(self._clock()):
            return None

        return payload


def build_token_codec(settings: Settings, clock: Optional[Clock] = None):
    """Create the codec selected by ``settings.token_scheme``.

    Raises:
        ValueError: If the scheme name is unknown
    """
    scheme = settings.token_scheme.lower()
    if scheme == "compact":
        return TokenCodec(settings.token_secret, settings.token_ttl_seconds, clock)
    if scheme == "jwt":
        return JwtTokenCodec(settings.token_secret, settings.token_ttl_seconds, clock)
    raise ValueError(f"Unknown token scheme: {settings.token_scheme}")
