"""Shared API helpers: responses, timing and per-request collaborators."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request

from sessionauth.core.config import config_duration
from sessionauth.core.extensions import get_mailer, get_refresh_store
from sessionauth.infra.sqlalchemy.identity_store import SQLAlchemyIdentityStore
from sessionauth.services._shared.base import BaseService
from sessionauth.services._shared.errors import ServiceError
from sessionauth.services.accounts import AccountService
from sessionauth.services.credentials import CredentialIssuer
from sessionauth.services.session import RevocationManager, SessionAuthenticator

F = TypeVar("F", bound=Callable[..., Any])

ISSUER_KEY = "credential_issuer"


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def translate_service_errors(func: F) -> F:
    """Re-raise :class:`ServiceError` from a handler as its HTTP counterpart."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except ServiceError as exc:
            raise BaseService().translate_exceptions(exc) from exc

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Collaborators
# --------------------------------------------------------------------------- #


def get_issuer() -> CredentialIssuer:
    """Return the issuer of the current app, built once from its config."""

    issuer = current_app.extensions.get(ISSUER_KEY)
    if issuer is None:
        issuer = CredentialIssuer.from_config(current_app.config)
        current_app.extensions[ISSUER_KEY] = issuer
    return cast(CredentialIssuer, issuer)


def get_authenticator() -> SessionAuthenticator:
    return SessionAuthenticator(
        issuer=get_issuer(),
        store=get_refresh_store(),
        identities=SQLAlchemyIdentityStore(),
    )


def get_revocation() -> RevocationManager:
    return RevocationManager(store=get_refresh_store(), identities=SQLAlchemyIdentityStore())


def get_account_service() -> AccountService:
    config = current_app.config
    return AccountService(
        issuer=get_issuer(),
        store=get_refresh_store(),
        revocation=get_revocation(),
        mailer=get_mailer(),
        verification_ttl=config_duration(config, "VERIFICATION_TOKEN_TTL"),
        reset_ttl=config_duration(config, "PASSWORD_RESET_TOKEN_TTL"),
    )
