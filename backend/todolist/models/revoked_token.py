from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from .todo import utcnow


class RevokedToken(SQLModel, table=True):
    __tablename__ = "revoked_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    jti: str = Field(index=True, unique=True)
    revoked_at: datetime = Field(default_factory=utcnow)
