"""FastAPI dependencies for DB sessions and authentication.

Provides:
- get_db: scoped SQLAlchemy session generator.
- get_current_user_id: verifies the bearer token and yields the owner id.
- get_current_user: loads the authenticated user for profile routes.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from . import crud, models, utils
from .database import SessionLocal
from .errors import AuthError, AuthErrorKind, NotFound


def get_db():
    """Yield a SQLAlchemy session and ensure it is closed afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user_id(authorization: Optional[str] = Header(None)) -> int:
    """Require a valid token and return the id it asserts; raise 401 otherwise.

    Stateless: the token alone identifies the caller, no user lookup is made.
    """
    token = _extract_bearer_token(authorization)
    if not token:
        raise AuthError(AuthErrorKind.MISSING)
    return utils.decode_access_token(token)


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> models.User:
    """Return the authenticated user; 404 if the account no longer exists."""
    user = crud.get_user(db, user_id)
    if not user:
        raise NotFound("User not found")
    return user
