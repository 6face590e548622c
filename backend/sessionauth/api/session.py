"""
Request-level session handling.

Extracts the credential carriers, runs :class:`SessionAuthenticator`, exposes
the verified :class:`Subject` on :data:`flask.g` and keeps the credential
cookies in sync with the outcome:

* a refresh (or any flow that issued a pair) sets both cookies;
* a rejection that invalidates the credentials expires both cookies;
* a missing credential or an unreachable store leaves them untouched.

Cookies are written in ``after_request``, which also runs for error
responses, so a rotated pair reaches the client even if the handler fails.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Flask, Request, Response, current_app, g, request

from sessionauth.api.deps import get_account_service, get_authenticator
from sessionauth.core.errors import AuthenticationFailed, Forbidden
from sessionauth.services._shared.base import BaseService
from sessionauth.services._shared.errors import (
    AuthFailureReason,
    ServiceError,
    SessionRejectedError,
)
from sessionauth.services.credentials import TokenPair
from sessionauth.services.session import Subject

log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"
COOKIE_SAMESITE = "Lax"

FORBIDDEN_DETAIL = "You do not have permission to perform this action"

_ISSUED_KEY = "issued_credentials"
_CLEAR_KEY = "clear_credentials"


def extract_credentials(req: Request) -> tuple[str | None, str | None]:
    """
    Return ``(access_token, refresh_token)`` carried by ``req``.

    ``Authorization: Bearer`` wins over the ``accessToken`` cookie. The refresh
    credential only travels as a cookie.
    """
    access: str | None = None
    scheme, _, value = req.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        # The cookie is not consulted as a fallback, even if this value is garbage.
        access = value.strip()
    if access is None:
        access = req.cookies.get(ACCESS_COOKIE) or None
    refresh = req.cookies.get(REFRESH_COOKIE) or None
    return access, refresh


def authenticate_request() -> Subject:
    """
    Authenticate the current request and attach ``g.subject``.

    :raises AuthenticationFailed: Generic 401; the reason is only logged.
    """
    access, refresh = extract_credentials(request)
    try:
        outcome = get_authenticator().authenticate(access, refresh)
    except SessionRejectedError as exc:
        if exc.reason.clears_credentials:
            clear_credentials()
        log.info(
            "Session rejected",
            extra={"subject_id": exc.subject_id, "reason": exc.reason.value},
        )
        raise BaseService().translate_exceptions(exc) from exc

    if outcome.new_pair is not None:
        issue_credentials(outcome.new_pair)
    g.subject = outcome.subject
    return outcome.subject


def require_session(func: F) -> F:
    """Decorator rejecting unauthenticated requests before ``func`` runs."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        authenticate_request()
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def restrict_to(*roles: str) -> Callable[[F], F]:
    """
    Decorator allowing only users whose role is in ``roles``.

    Apply it below :func:`require_session`; the role is read from the users
    table on every call, so a demotion takes effect immediately.

    :raises Forbidden: 403 when the signed-in user's role is not allowed.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            subject_id = current_subject().subject_id
            try:
                user = get_account_service().get_user(subject_id)
            except ServiceError as exc:
                raise BaseService().translate_exceptions(exc) from exc
            if user.role not in roles:
                log.info(
                    "Role not permitted",
                    extra={"subject_id": subject_id, "reason": f"role:{user.role}"},
                )
                raise Forbidden(FORBIDDEN_DETAIL)
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def current_subject() -> Subject:
    """Return the subject attached by :func:`require_session`."""
    subject = g.get("subject")
    if subject is None:
        raise AuthenticationFailed(AuthFailureReason.MISSING_CREDENTIAL.value)
    return subject


# --------------------------------------------------------------------------- #
# Cookie bookkeeping
# --------------------------------------------------------------------------- #


def issue_credentials(pair: TokenPair) -> None:
    """Schedule ``pair`` to be written as cookies on the response."""
    setattr(g, _ISSUED_KEY, pair)
    setattr(g, _CLEAR_KEY, False)


def clear_credentials() -> None:
    """Schedule both credential cookies to be expired on the response."""
    setattr(g, _CLEAR_KEY, True)
    g.pop(_ISSUED_KEY, None)


def set_credential_cookies(response: Response, pair: TokenPair, *, secure: bool) -> None:
    response.set_cookie(
        ACCESS_COOKIE,
        pair.access_token,
        max_age=pair.access_max_age,
        path="/",
        secure=secure,
        httponly=True,
        samesite=COOKIE_SAMESITE,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        pair.refresh_token,
        max_age=pair.refresh_max_age,
        path="/",
        secure=secure,
        httponly=True,
        samesite=COOKIE_SAMESITE,
    )


def clear_credential_cookies(response: Response, *, secure: bool) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            name, path="/", secure=secure, httponly=True, samesite=COOKIE_SAMESITE
        )


def _apply_credentials(response: Response) -> Response:
    secure = bool(current_app.config.get("COOKIE_SECURE", False))
    pair = g.pop(_ISSUED_KEY, None)
    clear = g.pop(_CLEAR_KEY, False)
    if pair is not None:
        set_credential_cookies(response, pair, secure=secure)
    elif clear:
        clear_credential_cookies(response, secure=secure)
    return response


def init_app(app: Flask) -> None:
    """Install the cookie writer on ``app``."""
    app.after_request(_apply_credentials)


__all__ = [
    "ACCESS_COOKIE",
    "REFRESH_COOKIE",
    "authenticate_request",
    "clear_credentials",
    "current_subject",
    "extract_credentials",
    "init_app",
    "issue_credentials",
    "require_session",
    "restrict_to",
]
