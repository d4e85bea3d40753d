from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings

# Use Argon2 instead of bcrypt (more reliable on Python 3.13)
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

ALGORITHM = "HS256"


class TokenError(Exception):
    """Raised when a bearer token cannot identify anyone."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def create_access_token(user_id: int, expires_minutes: Optional[int] = None) -> str:
    """Issue a signed access token for ``user_id``.

    The user id travels as the string ``sub`` claim; ``jti`` makes every token
    individually revocable on logout.
    """
    now = datetime.now(timezone.utc)
    minutes = settings.jwt_expire_minutes if expires_minutes is None else expires_minutes
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Return the verified claims of ``token``.

    Raises:
        TokenError: bad signature, expired, or missing ``sub``/``jti``.
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise TokenError(str(exc)) from exc

    sub, jti = claims.get("sub"), claims.get("jti")
    if not sub or not jti or not str(sub).isdigit():
        raise TokenError("Missing sub/jti")
    return claims
