"""
Per-request verify-and-maybe-rotate operation.

The authenticator is independent of HTTP: it receives the raw access and
refresh credentials and either returns a :class:`SessionOutcome` or raises
:class:`SessionRejectedError` with a server-side reason.

Refresh races
-------------
Two requests presenting the same expired access credential and the same
refresh credential can both pass the store comparison and both rotate.
The store keeps whichever ``put`` lands last; the other caller's new pair
stops matching and fails on its next refresh. No lock is taken.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sessionauth.services._shared.errors import (
    AuthFailureReason,
    SessionRejectedError,
    StoreUnavailableError,
)
from sessionauth.services._shared.ports import IdentityRecord, IdentityStore, RefreshTokenStore
from sessionauth.services.credentials import (
    Claims,
    CredentialIssuer,
    TokenType,
    TokenVerificationError,
    VerificationFailure,
    verify_token,
)

from .dto import SessionOutcome, SessionState, Subject

log = logging.getLogger(__name__)


def _revoked(issued_at: datetime, identity: IdentityRecord) -> bool:
    changed_at = identity.credentials_changed_at
    return changed_at is not None and issued_at < changed_at


@dataclass(slots=True)
class SessionAuthenticator:
    """
    Decide whether a caller is authenticated, refreshing on access expiry.

    :param issuer: Issues rotated pairs and holds the verification secrets.
    :param store: Current refresh credential per subject.
    :param identities: Subject lookup and revocation stamps.
    """

    issuer: CredentialIssuer
    store: RefreshTokenStore
    identities: IdentityStore

    def authenticate(self, access_token: str | None, refresh_token: str | None) -> SessionOutcome:
        """
        Verify the access credential, refreshing it when it merely expired.

        :param access_token: Raw access credential, if the request carried one.
        :param refresh_token: Raw refresh credential, if the request carried one.
        :returns: ``VALID`` outcome, or ``REFRESHED`` with the new pair.
        :raises SessionRejectedError: For every other case.
        """
        if not access_token:
            raise SessionRejectedError(AuthFailureReason.MISSING_CREDENTIAL)

        try:
            claims = self._verify(access_token, TokenType.ACCESS)
        except TokenVerificationError as exc:
            if exc.failure is VerificationFailure.EXPIRED and exc.claims is not None:
                return self._refresh(exc.claims, refresh_token)
            raise SessionRejectedError(AuthFailureReason.MALFORMED_TOKEN) from exc

        identity = self.identities.find_by_id(claims.subject)
        if identity is None or _revoked(claims.issued_at, identity):
            raise SessionRejectedError(
                AuthFailureReason.REVOKED_SESSION, subject_id=claims.subject
            )

        return SessionOutcome(
            subject=Subject(subject_id=claims.subject, issued_at=claims.issued_at),
            state=SessionState.VALID,
        )

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _verify(self, token: str, token_type: TokenType) -> Claims:
        return verify_token(
            token,
            self.issuer.secret_for(token_type),
            expected_type=token_type,
            algorithms=(self.issuer.algorithm,),
        )

    def _refresh(self, expired: Claims, refresh_token: str | None) -> SessionOutcome:
        subject_id = expired.subject

        def reject(reason: AuthFailureReason = AuthFailureReason.INVALID_OR_EXPIRED_REFRESH):
            return SessionRejectedError(reason, subject_id=subject_id)

        if not refresh_token:
            raise reject()
        try:
            claims = self._verify(refresh_token, TokenType.REFRESH)
        except TokenVerificationError as exc:
            raise reject() from exc
        if claims.subject != subject_id:
            raise reject()

        identity = self.identities.find_by_id(subject_id)
        if identity is None:
            raise reject()
        if _revoked(claims.issued_at, identity):
            raise reject(AuthFailureReason.REVOKED_SESSION)

        try:
            if not self.store.matches(subject_id, refresh_token):
                raise reject()
            pair = self.issuer.issue(subject_id)
            self.store.put(subject_id, pair.refresh_token, pair.refresh_max_age)
        except StoreUnavailableError as exc:
            raise reject(AuthFailureReason.STORE_UNAVAILABLE) from exc

        log.info(
            "Session refreshed",
            extra={"subject_id": subject_id, "outcome": SessionState.REFRESHED.value},
        )
        return SessionOutcome(
            subject=Subject(subject_id=subject_id, issued_at=pair.issued_at),
            state=SessionState.REFRESHED,
            new_pair=pair,
        )
