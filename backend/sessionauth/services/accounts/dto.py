"""
DTOs for AccountService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sessionauth.services.credentials import TokenPair

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param name: Display name.
    :type name: str
    :param email: Login email (normalized to lowercase by the model).
    :type email: str
    :param password: Raw password to be hashed by the model.
    :type password: str
    """

    name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for password login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    current_password: str
    new_password: str


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public-safe user representation.

    :param id: User primary key (the subject id in string form).
    :param email: Normalized email.
    :param name: Display name.
    :param is_verified: Email confirmation flag.
    :param role: Authorization role.
    :param last_login_at: Last password login, if any.
    """

    id: int
    email: str
    name: str
    is_verified: bool
    role: str = "user"
    last_login_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class AuthResult:
    """
    A user together with the credentials just issued to them.

    :param user: Public user payload.
    :param pair: Fresh access/refresh pair; its refresh token is already
        recorded in the refresh store.
    """

    user: UserOut
    pair: TokenPair
