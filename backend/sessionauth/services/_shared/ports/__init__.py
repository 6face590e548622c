"""
sessionauth.services._shared.ports
==================================

Collection of *ports* (hexagonal interfaces) that define the contracts
between the session/account services and their infrastructure.

Modules
-------
- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore` (one hashed refresh credential per
    subject, overwritten on rotation) and the canonical key/hash helpers.

- :mod:`identity_store`:
    Defines :class:`~.IdentityStore`: subject lookup and the
    ``credentials_changed_at`` stamp used for revocation.

- :mod:`mailer`:
    Defines :class:`~.AccountMailer`: delivery of verification and
    password-reset tokens.

Design Notes
------------
Concrete adapters (Redis, SQLAlchemy, logging mailer) implement these
interfaces under ``sessionauth.infra``. The in-memory variants kept here are
test doubles and development fallbacks.
"""

from __future__ import annotations

from .identity_store import IdentityRecord, IdentityStore, InMemoryIdentityStore
from .mailer import AccountMailer, RecordingMailer, SentMessage
from .refresh_token_store import (
    REFRESH_KEY_PREFIX,
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
    digests_match,
    hash_token,
    refresh_key,
)

__all__ = [
    "RefreshTokenStore",
    "InMemoryRefreshTokenStore",
    "REFRESH_KEY_PREFIX",
    "refresh_key",
    "hash_token",
    "digests_match",
    "IdentityStore",
    "IdentityRecord",
    "InMemoryIdentityStore",
    "AccountMailer",
    "RecordingMailer",
    "SentMessage",
]
