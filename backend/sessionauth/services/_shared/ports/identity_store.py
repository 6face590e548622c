from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class IdentityRecord:
    """
    Session-relevant view of a subject.

    :ivar subject_id: Opaque subject identifier carried in ``sub``.
    :ivar credentials_changed_at: Last password change/reset or forced
        revocation (UTC), ``None`` when it never happened.
    """

    subject_id: str
    credentials_changed_at: datetime | None = None


class IdentityStore(Protocol):
    """Port over the user directory consumed by the session layer."""

    def find_by_id(self, subject_id: str) -> IdentityRecord | None: ...

    def mark_credentials_changed(self, subject_id: str, at: datetime) -> bool: ...


class InMemoryIdentityStore(IdentityStore):
    """Dictionary-backed identity store for unit tests."""

    def __init__(self, subject_ids: list[str] | tuple[str, ...] = ()) -> None:
        self._records: dict[str, IdentityRecord] = {
            sid: IdentityRecord(subject_id=sid) for sid in subject_ids
        }

    def add(self, subject_id: str) -> None:
        self._records.setdefault(subject_id, IdentityRecord(subject_id=subject_id))

    def remove(self, subject_id: str) -> None:
        self._records.pop(subject_id, None)

    def find_by_id(self, subject_id: str) -> IdentityRecord | None:
        return self._records.get(subject_id)

    def mark_credentials_changed(self, subject_id: str, at: datetime) -> bool:
        if subject_id not in self._records:
            return False
        self._records[subject_id] = IdentityRecord(subject_id=subject_id, credentials_changed_at=at)
        return True
