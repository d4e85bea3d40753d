import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlmodel import Session, select

from todolist.api.deps import bearer
from todolist.core.database import get_session
from todolist.core.security import (
    TokenError,
    hash_password,
    verify_password,
    create_access_token,
    decode_token,
)
from todolist.models import User, RevokedToken
from todolist.schemas.auth import SignupIn, LoginIn, TokenOut
from todolist.schemas.todo import MessageOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=TokenOut, status_code=201)
def signup(payload: SignupIn, session: Session = Depends(get_session)):
    existing = session.exec(
        select(User).where(User.email == payload.email)
    ).first()

    if existing:
        raise HTTPException(
            status_code=400,
            detail="Email already registered"
        )

    user = User(
        email=payload.email,
        password_hash=hash_password(payload.password)
    )

    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Registered user id=%s", user.id)

    return TokenOut(access_token=create_access_token(user.id))


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, session: Session = Depends(get_session)):
    # Unknown emails are rejected; accounts only come from /auth/signup
    user = session.exec(
        select(User).where(User.email == payload.email)
    ).first()

    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    return TokenOut(access_token=create_access_token(user.id))


@router.post("/logout", response_model=MessageOut)
def logout(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    session: Session = Depends(get_session),
):
    if creds is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    try:
        jti = decode_token(creds.credentials)["jti"]
    except TokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    exists = session.exec(
        select(RevokedToken).where(RevokedToken.jti == jti)
    ).first()

    if not exists:
        session.add(RevokedToken(jti=jti))
        session.commit()

    return MessageOut(message="Logged out")
