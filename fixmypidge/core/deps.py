"""FastAPI dependencies for authentication and database access."""

from typing import Generator

import jwt
from fastapi import Request
from sqlalchemy.orm import Session

from fixmypidge.core.exceptions import AuthorizationError
from fixmypidge.core.security import decode_session_token
from fixmypidge.db.session import SessionLocal


# Cookie and header names
COOKIE_NAME = "fixmypidge_session"
BEARER_PREFIX = "bearer "


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _extract_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization") or ""
    if authorization.lower().startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip() or None
    return request.cookies.get(COOKIE_NAME)


def get_current_actor(request: Request) -> str:
    """
    Resolve the citizen id from the session token.

    Raises:
        AuthorizationError: Missing, expired or forged token
    """
    token = _extract_token(request)
    if not token:
        raise AuthorizationError()
    try:
        payload = decode_session_token(token)
    except jwt.InvalidTokenError:
        raise AuthorizationError()

    actor_id = payload.get("sub")
    if not actor_id:
        raise AuthorizationError()
    return str(actor_id)
