from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sessionauth.services._shared.ports import IdentityRecord, IdentityStore
from sessionauth.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


@dataclass(slots=True)
class SQLAlchemyIdentityStore(IdentityStore):
    """
    Identity store reading the ``users`` table through units of work.

    .. note::
       Requires an active Flask app context (Flask-SQLAlchemy session).
    """

    def find_by_id(self, subject_id: str) -> IdentityRecord | None:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            user = uow.users.get_by_subject_id(subject_id)
            if user is None:
                return None
            return IdentityRecord(
                subject_id=user.subject_id,
                credentials_changed_at=user.credentials_changed_at,
            )

    def mark_credentials_changed(self, subject_id: str, at: datetime) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            user = uow.users.get_by_subject_id(subject_id)
            if user is None:
                return False
            user.mark_credentials_changed(at=at)
            return True
