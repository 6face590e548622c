"""Fixtures for tests exercising services without HTTP."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sessionauth.services._shared.ports import InMemoryIdentityStore, InMemoryRefreshTokenStore
from sessionauth.services.credentials import CredentialIssuer

ACCESS_SECRET = "unit-access-secret-0123456789abcdef"
REFRESH_SECRET = "unit-refresh-secret-fedcba9876543210"


@pytest.fixture
def issuer() -> CredentialIssuer:
    """Issuer with a 15 minute access and 7 day refresh lifetime."""
    return CredentialIssuer(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
    )


@pytest.fixture
def identities() -> InMemoryIdentityStore:
    return InMemoryIdentityStore(["u1", "u2"])


@pytest.fixture
def memory_store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()
