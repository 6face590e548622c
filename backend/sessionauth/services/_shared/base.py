# sessionauth/services/_shared/base.py
from __future__ import annotations

from sessionauth.core import errors as api_errors
from sessionauth.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    MailDeliveryError,
    NotFoundError,
    OneTimeTokenError,
    ServiceError,
    SessionRejectedError,
    StoreUnavailableError,
    UnverifiedAccountError,
)
from sessionauth.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Domain rules (password hashing, one-time tokens) live in the models.
    """

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork()

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, SessionRejectedError):
            # → 401, generic detail; the reason is only logged
            return api_errors.AuthenticationFailed(exc.reason.value)

        if isinstance(exc, InvalidCredentialsError | UnverifiedAccountError):
            # → 401 Unauthorized
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, NotFoundError):
            # → 404 Not Found
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            # → 409 Conflict
            return api_errors.Conflict(str(exc))

        if isinstance(exc, StoreUnavailableError):
            # → 503 Service Unavailable
            return api_errors.APIError(
                message="Session store unavailable",
                status_code=503,
                code="service_unavailable",
            )

        if isinstance(exc, MailDeliveryError):
            return api_errors.APIError(
                message="There was an error sending the email. Try again later.",
                status_code=500,
                code="internal_server_error",
            )

        if isinstance(exc, OneTimeTokenError):
            return api_errors.APIError(
                message=str(exc) or "Token is invalid or has expired",
                status_code=400,
                code="bad_request",
            )

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
