"""Account flows: registration, login, verification, password lifecycle."""

from .dto import AuthResult, LoginIn, PasswordChangeIn, RegisterIn, UserOut
from .service import AccountService

__all__ = [
    "AccountService",
    "AuthResult",
    "LoginIn",
    "PasswordChangeIn",
    "RegisterIn",
    "UserOut",
]
