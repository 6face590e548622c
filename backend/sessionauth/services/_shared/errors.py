"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between
repositories, stores, domain models, and application services.

The translation to HTTP responses (RFC 7807) is handled by
``sessionauth/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError mentions the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, stores or domain logic.
    - The API layer or BaseService will later translate them to APIError.
    """


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


class InvalidCredentialsError(ServiceError):
    """Raised when an email/password pair does not check out."""


class UnverifiedAccountError(ServiceError):
    """Raised on password login before the email address was confirmed."""


class OneTimeTokenError(ServiceError):
    """Raised when a verification or reset token is unknown or expired."""


class MailDeliveryError(ServiceError):
    """Raised by mailer adapters when a message could not be handed off."""


class StoreUnavailableError(ServiceError):
    """
    Raised when the refresh store cannot be reached within its timeout.

    Callers on the authentication path treat it as a failed authentication.
    """


class AuthFailureReason(str, Enum):
    """Server-side classification of a rejected session."""

    MISSING_CREDENTIAL = "missing_credential"
    MALFORMED_TOKEN = "malformed_token"
    INVALID_OR_EXPIRED_REFRESH = "invalid_or_expired_refresh"
    REVOKED_SESSION = "revoked_session"
    STORE_UNAVAILABLE = "store_unavailable"

    @property
    def clears_credentials(self) -> bool:
        """Whether the client's credential carriers must be discarded.

        A store outage rejects the request but keeps the cookies, so the same
        credentials work again once the store is back.
        """
        return self not in (
            AuthFailureReason.MISSING_CREDENTIAL,
            AuthFailureReason.STORE_UNAVAILABLE,
        )


class SessionRejectedError(ServiceError):
    """
    Raised by the session authenticator when a caller is not authenticated.

    :param reason: Failure classification (never shown to clients).
    :param subject_id: Subject claimed by the credentials, when known.
    """

    def __init__(self, reason: AuthFailureReason, *, subject_id: str | None = None) -> None:
        super().__init__(reason.value)
        self.reason = reason
        self.subject_id = subject_id
