from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from sessionauth.services._shared.errors import NotFoundError
from sessionauth.services._shared.ports import IdentityStore, RefreshTokenStore
from sessionauth.services.credentials.dto import utcnow

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RevocationManager:
    """
    Invalidate sessions that remain cryptographically valid.

    :param store: Refresh store whose record is dropped.
    :param identities: Identity store receiving ``credentials_changed_at``.
    :param clock: Returns the current aware UTC time.
    """

    store: RefreshTokenStore
    identities: IdentityStore
    clock: Callable[[], datetime] = field(default=utcnow)

    def logout(self, subject_id: str) -> bool:
        """
        Drop the subject's refresh record. The caller clears the cookies.

        Outstanding access credentials stay usable until they expire.

        :returns: ``True`` if a record existed.
        :raises StoreUnavailableError: When the store cannot be reached.
        """
        removed = self.store.delete(subject_id)
        log.info("Session logged out", extra={"subject_id": subject_id, "outcome": "logout"})
        return removed

    def on_credential_change(self, subject_id: str) -> datetime:
        """
        Revoke every credential issued to ``subject_id`` before now.

        The stamp is written before the store record is dropped, so a store
        failure still leaves older access and refresh credentials rejected.

        :returns: The new ``credentials_changed_at``.
        :raises NotFoundError: If the subject does not exist.
        :raises StoreUnavailableError: When the store cannot be reached.
        """
        at = self.clock()
        if not self.identities.mark_credentials_changed(subject_id, at):
            raise NotFoundError("User", subject_id)
        self.store.delete(subject_id)
        log.info(
            "Credentials changed; sessions revoked",
            extra={"subject_id": subject_id, "outcome": "revoked"},
        )
        return at
