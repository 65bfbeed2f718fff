"""Security utilities for JWT session tokens and shared-secret checks."""

import hmac
from datetime import datetime, timedelta, timezone

import jwt

from fixmypidge.core.config import settings


# =============================================================================
# Session Token (JWT in bearer header or cookie)
# =============================================================================

def create_session_token(user_id: str, expires_hours: int | None = None) -> str:
    """
    Create signed session JWT.

    Always signs with current secret (JWT_SECRET).
    """
    hours = settings.JWT_EXPIRES_HOURS if expires_hours is None else expires_hours
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(hours=hours),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_session_token(token: str) -> dict:
    """
    Decode and verify session JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore


# =============================================================================
# Shared secrets
# =============================================================================

def verify_secret(provided: str | None, expected: str | None) -> bool:
    """Constant-time comparison; empty values never match."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())
