"""
DTOs and value types for credential issuance and verification.

Timestamps cross the JWT boundary as NumericDate values. ``iat`` keeps
microsecond precision (fractional seconds) so it compares exactly with the
``credentials_changed_at`` instant stored for a subject.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_MICROSECOND = timedelta(microseconds=1)


def utcnow() -> datetime:
    """Default clock for issuers and revocation."""
    return datetime.now(UTC)


def to_epoch_micros(moment: datetime) -> int:
    """Exact integer microseconds since the epoch for an aware datetime."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return (moment - EPOCH) // _MICROSECOND


def from_epoch_micros(micros: int) -> datetime:
    return EPOCH + timedelta(microseconds=micros)


def encode_issued_at(moment: datetime) -> float:
    """Encode ``moment`` as a fractional NumericDate."""
    return to_epoch_micros(moment) / 1_000_000


def decode_issued_at(value: object) -> datetime:
    """
    Decode a fractional NumericDate written by :func:`encode_issued_at`.

    :raises ValueError: If ``value`` is not a finite number.
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError("iat must be numeric")
    return from_epoch_micros(round(float(value) * 1_000_000))


class TokenType(str, Enum):
    """Value of the ``type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


class VerificationFailure(str, Enum):
    """
    Classified verification failure.

    Only ``EXPIRED`` is recoverable (through a refresh).
    """

    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access and refresh credentials issued together.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    :param issued_at: Shared ``iat`` of both tokens.
    :type issued_at: datetime
    :param access_ttl: Access lifetime used for ``exp`` and cookie ``Max-Age``.
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh lifetime used for ``exp``, the store TTL and
        cookie ``Max-Age``.
    :type refresh_ttl: timedelta
    """

    access_token: str
    refresh_token: str
    issued_at: datetime
    access_ttl: timedelta
    refresh_ttl: timedelta

    @property
    def access_max_age(self) -> int:
        return int(self.access_ttl.total_seconds())

    @property
    def refresh_max_age(self) -> int:
        return int(self.refresh_ttl.total_seconds())


@dataclass(frozen=True, slots=True)
class Claims:
    """
    Verified claims of a credential.

    :param subject: Value of ``sub``.
    :param token_type: Value of ``type``.
    :param issued_at: ``iat`` at microsecond precision.
    :param expires_at: ``exp``.
    :param jti: Unique token id.
    """

    subject: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    jti: str
