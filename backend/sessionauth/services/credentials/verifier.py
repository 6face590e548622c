"""
Token verification with classified failures.

Only ``EXPIRED`` carries claims: the signature was checked, so the caller
may trust the subject when deciding whether a refresh is allowed.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import jwt

from .dto import Claims, TokenType, VerificationFailure, decode_issued_at

REQUIRED_CLAIMS = ("exp", "iat", "sub", "jti")


class TokenVerificationError(Exception):
    """
    Raised when a token cannot be accepted.

    :param failure: Classification of the failure.
    :param claims: Signature-verified claims, only for ``EXPIRED``.
    """

    def __init__(self, failure: VerificationFailure, claims: Claims | None = None) -> None:
        super().__init__(failure.value)
        self.failure = failure
        self.claims = claims

    @property
    def recoverable(self) -> bool:
        return self.failure is VerificationFailure.EXPIRED


def _decode(
    token: str, secret: str, algorithms: Sequence[str], *, verify_exp: bool
) -> dict[str, Any]:
    return jwt.decode(
        token,
        secret,
        algorithms=list(algorithms),
        options={"require": list(REQUIRED_CLAIMS), "verify_exp": verify_exp},
    )


def _to_claims(payload: dict[str, Any], expected_type: TokenType) -> Claims:
    if payload.get("type") != expected_type.value:
        raise TokenVerificationError(VerificationFailure.MALFORMED)
    subject = payload.get("sub")
    jti = payload.get("jti")
    if not isinstance(subject, str) or not subject or not isinstance(jti, str):
        raise TokenVerificationError(VerificationFailure.MALFORMED)
    try:
        issued_at = decode_issued_at(payload["iat"])
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
    except (TypeError, ValueError, OverflowError) as exc:
        raise TokenVerificationError(VerificationFailure.MALFORMED) from exc
    return Claims(
        subject=subject,
        token_type=expected_type,
        issued_at=issued_at,
        expires_at=expires_at,
        jti=jti,
    )


def verify_token(
    token: str,
    secret: str,
    *,
    expected_type: TokenType,
    algorithms: Sequence[str] = ("HS256",),
) -> Claims:
    """
    Verify ``token`` against ``secret`` and return its claims.

    :param token: Encoded JWT.
    :param secret: HMAC secret of the expected credential kind.
    :param expected_type: Required value of the ``type`` claim.
    :param algorithms: Accepted algorithms; the token header cannot widen it.
    :raises TokenVerificationError: ``EXPIRED`` (with claims),
        ``BAD_SIGNATURE`` or ``MALFORMED``.
    """
    if not token or not isinstance(token, str):
        raise TokenVerificationError(VerificationFailure.MALFORMED)
    try:
        payload = _decode(token, secret, algorithms, verify_exp=True)
    except jwt.ExpiredSignatureError:
        # Signature already checked by PyJWT before the exp claim.
        try:
            payload = _decode(token, secret, algorithms, verify_exp=False)
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationError(VerificationFailure.MALFORMED) from exc
        claims = _to_claims(payload, expected_type)
        raise TokenVerificationError(VerificationFailure.EXPIRED, claims) from None
    except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as exc:
        raise TokenVerificationError(VerificationFailure.BAD_SIGNATURE) from exc
    except jwt.InvalidTokenError as exc:
        raise TokenVerificationError(VerificationFailure.MALFORMED) from exc
    return _to_claims(payload, expected_type)
