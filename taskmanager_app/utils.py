"""Utility functions for password hashing and JWT session tokens."""

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .errors import AuthError, AuthErrorKind
from .settings import settings

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ---------- Password hashing ----------
def hash_password(plain: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return _pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plaintext password against its bcrypt hash.

    Malformed hashes or over-long secrets count as a mismatch rather than an
    error, so callers can answer with a plain authentication failure.
    """
    try:
        return _pwd_context.verify(plain, hashed)
    except ValueError:
        return False


# ---------- JWT ----------
def create_access_token(owner_id: int, expires_minutes: float | None = None) -> str:
    """Issue a signed token asserting ``owner_id``, valid for the configured lifetime."""
    if expires_minutes is None:
        expires_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    now = datetime.now(tz=timezone.utc)
    to_encode = {
        "sub": str(owner_id),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> int:
    """Verify a token and return the owner id it asserts.

    Raises AuthError(EXPIRED) past expiry and AuthError(INVALID) for any
    signature, format or claim problem.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError(AuthErrorKind.EXPIRED)
    except JWTError:
        raise AuthError(AuthErrorKind.INVALID)

    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError):
        raise AuthError(AuthErrorKind.INVALID)
