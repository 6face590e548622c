# sessionauth/services/session/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from sessionauth.services.credentials import TokenPair


class SessionState(str, Enum):
    """How an authenticated request got through: as presented, or after a refresh."""

    VALID = "valid"
    REFRESHED = "refreshed"


@dataclass(frozen=True, slots=True)
class Subject:
    """
    Authenticated caller attached to the request.

    :param subject_id: Opaque identifier from ``sub``.
    :type subject_id: str
    :param issued_at: ``iat`` of the access credential in use.
    :type issued_at: datetime
    """

    subject_id: str
    issued_at: datetime


@dataclass(frozen=True, slots=True)
class SessionOutcome:
    """
    Result of a successful authentication.

    :param subject: Authenticated caller.
    :param state: ``VALID`` or ``REFRESHED``.
    :param new_pair: Rotated credentials to transmit, only when refreshed.
    """

    subject: Subject
    state: SessionState
    new_pair: TokenPair | None = None

    @property
    def refreshed(self) -> bool:
        return self.state is SessionState.REFRESHED
