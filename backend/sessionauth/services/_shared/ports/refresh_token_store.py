from __future__ import annotations

import hashlib
import hmac
import threading
import time
from dataclasses import dataclass
from typing import Protocol

#: Single namespace for refresh records; one key per subject.
REFRESH_KEY_PREFIX = "refresh:"


def refresh_key(subject_id: str) -> str:
    """Return the canonical store key for ``subject_id``."""
    return f"{REFRESH_KEY_PREFIX}{subject_id}"


def hash_token(token: str) -> str:
    """Return the SHA-256 hex digest persisted in place of a raw refresh token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def digests_match(stored: str | None, token: str) -> bool:
    """Constant-time comparison of a stored digest with a presented token."""
    if not stored:
        return False
    return hmac.compare_digest(stored, hash_token(token))


class RefreshTokenStore(Protocol):
    """
    Store holding the single currently valid refresh credential per subject.

    Contract
    --------
    - ``put`` is an unconditional overwrite: the previous credential of the
      subject stops matching the instant the new one is written.
    - No history is kept and no compare-and-swap is offered; concurrent
      writers resolve as last-write-wins.
    - Values are one-way digests, never raw tokens.
    - Backend failures raise :class:`~sessionauth.services._shared.errors.StoreUnavailableError`.
    """

    def put(self, subject_id: str, token: str, ttl_seconds: int) -> None:
        """Store the digest of ``token`` for ``subject_id`` with a TTL."""

    def get(self, subject_id: str) -> str | None:
        """Return the stored digest, or ``None`` when absent or expired."""

    def matches(self, subject_id: str, token: str) -> bool:
        """Return ``True`` when ``token`` is the subject's current credential."""

    def delete(self, subject_id: str) -> bool:
        """Remove the subject's record. :returns: True if one existed."""

    def ping(self) -> bool:
        """Return ``True`` when the backend answers."""

    def close(self) -> None:
        """Release backend resources."""


@dataclass(frozen=True, slots=True)
class _Record:
    digest: str
    expires_at: float


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    Process-local refresh store used in unit tests and single-process development.

    .. note::
       A lock keeps each call atomic, mirroring a single Redis command.
    """

    def __init__(self) -> None:
        self._records: dict[str, _Record] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> float:
        return time.time()

    def put(self, subject_id: str, token: str, ttl_seconds: int) -> None:
        ttl = max(1, int(ttl_seconds))
        with self._lock:
            self._records[refresh_key(subject_id)] = _Record(
                digest=hash_token(token),
                expires_at=self._now() + ttl,
            )

    def get(self, subject_id: str) -> str | None:
        key = refresh_key(subject_id)
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            if record.expires_at <= self._now():
                del self._records[key]
                return None
            return record.digest

    def matches(self, subject_id: str, token: str) -> bool:
        return digests_match(self.get(subject_id), token)

    def delete(self, subject_id: str) -> bool:
        with self._lock:
            return self._records.pop(refresh_key(subject_id), None) is not None

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        with self._lock:
            self._records.clear()
