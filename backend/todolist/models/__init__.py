from .user import User
from .todo import Todo, Urgency
from .revoked_token import RevokedToken

__all__ = ["User", "Todo", "Urgency", "RevokedToken"]
