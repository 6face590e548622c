"""Tests for logout and credential-change revocation."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime, timedelta

import pytest
from sessionauth.services._shared.errors import (
    AuthFailureReason,
    NotFoundError,
    SessionRejectedError,
    StoreUnavailableError,
)
from sessionauth.services._shared.ports import InMemoryRefreshTokenStore
from sessionauth.services.session import RevocationManager, SessionAuthenticator, SessionState

CHANGED_AT = datetime(2026, 5, 1, 9, 30, 0, 250000, tzinfo=UTC)


@pytest.fixture
def revocation(memory_store, identities):
    return RevocationManager(store=memory_store, identities=identities, clock=lambda: CHANGED_AT)


@pytest.fixture
def auth(issuer, memory_store, identities):
    return SessionAuthenticator(issuer=issuer, store=memory_store, identities=identities)


def _login(issuer, store, subject_id="u1"):
    pair = issuer.issue(subject_id)
    store.put(subject_id, pair.refresh_token, pair.refresh_max_age)
    return pair


class TestLogout:
    def test_logout_drops_refresh_record(self, revocation, issuer, memory_store):
        pair = _login(issuer, memory_store)

        assert revocation.logout("u1") is True
        assert memory_store.get("u1") is None
        assert not memory_store.matches("u1", pair.refresh_token)

    def test_logout_is_idempotent(self, revocation):
        assert revocation.logout("u1") is False

    def test_access_stays_valid_until_expiry(self, revocation, auth, issuer, memory_store):
        pair = _login(issuer, memory_store)
        revocation.logout("u1")

        assert auth.authenticate(pair.access_token, None).state is SessionState.VALID

    def test_logout_blocks_implicit_refresh(self, revocation, auth, issuer, memory_store):
        past = datetime.now(UTC) - timedelta(minutes=20)
        pair = _login(dataclasses.replace(issuer, clock=lambda: past), memory_store)
        revocation.logout("u1")

        with pytest.raises(SessionRejectedError) as excinfo:
            auth.authenticate(pair.access_token, pair.refresh_token)
        assert excinfo.value.reason is AuthFailureReason.INVALID_OR_EXPIRED_REFRESH


class TestCredentialChange:
    def test_stamps_identity_and_drops_record(
        self, revocation, issuer, memory_store, identities
    ):
        _login(issuer, memory_store)

        at = revocation.on_credential_change("u1")

        assert at == CHANGED_AT
        assert identities.find_by_id("u1").credentials_changed_at == CHANGED_AT
        assert memory_store.get("u1") is None

    def test_older_access_is_rejected_immediately(self, memory_store, identities, issuer, auth):
        pair = _login(issuer, memory_store)
        manager = RevocationManager(store=memory_store, identities=identities)

        manager.on_credential_change("u1")

        with pytest.raises(SessionRejectedError) as excinfo:
            auth.authenticate(pair.access_token, pair.refresh_token)
        assert excinfo.value.reason is AuthFailureReason.REVOKED_SESSION

    def test_pair_issued_after_change_is_valid(self, memory_store, identities, issuer, auth):
        manager = RevocationManager(store=memory_store, identities=identities)
        manager.on_credential_change("u1")

        fresh = _login(issuer, memory_store)
        assert auth.authenticate(fresh.access_token, None).state is SessionState.VALID

    def test_other_subjects_are_untouched(self, revocation, issuer, memory_store, auth):
        other = _login(issuer, memory_store, "u2")
        revocation.on_credential_change("u1")

        assert memory_store.matches("u2", other.refresh_token)
        assert auth.authenticate(other.access_token, None).state is SessionState.VALID

    def test_unknown_subject(self, revocation):
        with pytest.raises(NotFoundError):
            revocation.on_credential_change("ghost")

    def test_stamp_survives_store_outage(self, identities):
        class Down(InMemoryRefreshTokenStore):
            def delete(self, subject_id):
                raise StoreUnavailableError("down")

        manager = RevocationManager(store=Down(), identities=identities, clock=lambda: CHANGED_AT)

        with pytest.raises(StoreUnavailableError):
            manager.on_credential_change("u1")
        assert identities.find_by_id("u1").credentials_changed_at == CHANGED_AT
