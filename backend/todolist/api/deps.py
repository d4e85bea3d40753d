import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session, select

from todolist.core.database import get_session
from todolist.core.security import TokenError, decode_token
from todolist.models import User, RevokedToken

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is "no session", answered below with 401
bearer = HTTPBearer(auto_error=False)


def get_current_user_id(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    session: Session = Depends(get_session),
) -> Optional[int]:
    """Resolve the caller to a user id, or None when there is no valid session."""
    if creds is None:
        return None

    try:
        payload = decode_token(creds.credentials)
    except TokenError as exc:
        logger.info("Rejected bearer token: %s", exc)
        return None

    revoked = session.exec(select(RevokedToken).where(RevokedToken.jti == payload["jti"])).first()
    if revoked:
        return None

    user = session.get(User, int(payload["sub"]))
    if not user:
        return None

    return user.id


def require_user_id(user_id: Optional[int] = Depends(get_current_user_id)) -> int:
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id
