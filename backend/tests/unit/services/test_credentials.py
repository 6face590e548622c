"""Tests for credential issuance and classified verification."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime, timedelta

import jwt
import pytest
from sessionauth.services.credentials import (
    CredentialIssuer,
    TokenType,
    TokenVerificationError,
    VerificationFailure,
    verify_token,
)
from sessionauth.services.credentials.dto import decode_issued_at, encode_issued_at

ACCESS_SECRET = "unit-access-secret-0123456789abcdef"
REFRESH_SECRET = "unit-refresh-secret-fedcba9876543210"


def _failure(token: str, secret: str, token_type: TokenType) -> TokenVerificationError:
    with pytest.raises(TokenVerificationError) as excinfo:
        verify_token(token, secret, expected_type=token_type)
    return excinfo.value


def _payload(**overrides) -> dict:
    now = datetime.now(UTC)
    payload = {
        "sub": "u1",
        "type": "access",
        "iat": now.timestamp(),
        "exp": int((now + timedelta(minutes=5)).timestamp()),
        "jti": "abc",
    }
    payload.update(overrides)
    return {k: v for k, v in payload.items() if v is not None}


class TestIssuer:
    def test_issue_returns_pair_for_subject(self, issuer):
        pair = issuer.issue("u1")

        access = verify_token(pair.access_token, ACCESS_SECRET, expected_type=TokenType.ACCESS)
        refresh = verify_token(pair.refresh_token, REFRESH_SECRET, expected_type=TokenType.REFRESH)

        assert access.subject == refresh.subject == "u1"
        assert access.issued_at == refresh.issued_at == pair.issued_at
        assert access.expires_at == datetime.fromtimestamp(
            int((pair.issued_at + timedelta(minutes=15)).timestamp()), tz=UTC
        )
        assert refresh.expires_at > access.expires_at

    def test_issue_keeps_microsecond_issued_at(self, issuer):
        moment = datetime(2026, 3, 1, 12, 0, 0, 123456, tzinfo=UTC)
        fixed = dataclasses.replace(issuer, clock=lambda: moment)

        # The fixed moment lies in the past, so skip the exp check.
        payload = jwt.decode(
            fixed.issue("u1").access_token,
            ACCESS_SECRET,
            algorithms=["HS256"],
            options={"verify_exp": False},
        )
        assert decode_issued_at(payload["iat"]) == moment

    def test_every_issue_gets_a_distinct_jti(self, issuer):
        first, second = issuer.issue("u1"), issuer.issue("u1")

        def jti(token, secret):
            return jwt.decode(token, secret, algorithms=["HS256"])["jti"]

        assert jti(first.access_token, ACCESS_SECRET) != jti(second.access_token, ACCESS_SECRET)
        assert jti(first.refresh_token, REFRESH_SECRET) != jti(
            first.access_token, ACCESS_SECRET
        )

    def test_pair_exposes_cookie_max_ages(self, issuer):
        pair = issuer.issue("u1")
        assert pair.access_max_age == 15 * 60
        assert pair.refresh_max_age == 7 * 24 * 3600

    @pytest.mark.parametrize(
        "overrides",
        [
            {"refresh_secret": ACCESS_SECRET},
            {"access_secret": ""},
            {"access_ttl": timedelta(days=7)},
            {"algorithm": "RS256"},
        ],
    )
    def test_rejects_unsafe_settings(self, issuer, overrides):
        with pytest.raises(ValueError):
            dataclasses.replace(issuer, **overrides)

    def test_issue_requires_subject(self, issuer):
        with pytest.raises(ValueError):
            issuer.issue("")

    def test_from_config_parses_ttls(self):
        built = CredentialIssuer.from_config(
            {
                "JWT_ACCESS_SECRET": ACCESS_SECRET,
                "JWT_REFRESH_SECRET": REFRESH_SECRET,
                "JWT_ACCESS_EXPIRE": "2h",
                "JWT_REFRESH_EXPIRE": "7d",
            }
        )
        assert built.access_ttl == timedelta(hours=2)
        assert built.refresh_ttl == timedelta(days=7)
        assert built.algorithm == "HS256"


class TestVerifier:
    def test_access_token_fails_under_refresh_secret(self, issuer):
        pair = issuer.issue("u1")
        err = _failure(pair.access_token, REFRESH_SECRET, TokenType.ACCESS)
        assert err.failure is VerificationFailure.BAD_SIGNATURE
        assert err.claims is None
        assert not err.recoverable

    def test_refresh_token_is_not_an_access_token(self, issuer):
        pair = issuer.issue("u1")
        err = _failure(pair.refresh_token, ACCESS_SECRET, TokenType.ACCESS)
        assert err.failure is VerificationFailure.BAD_SIGNATURE

    def test_wrong_type_claim_is_malformed(self):
        token = jwt.encode(_payload(type="refresh"), ACCESS_SECRET, algorithm="HS256")
        err = _failure(token, ACCESS_SECRET, TokenType.ACCESS)
        assert err.failure is VerificationFailure.MALFORMED

    def test_unsigned_token_is_rejected(self):
        token = jwt.encode(_payload(), None, algorithm="none")
        err = _failure(token, ACCESS_SECRET, TokenType.ACCESS)
        assert err.failure is VerificationFailure.BAD_SIGNATURE

    def test_other_algorithm_is_rejected(self):
        token = jwt.encode(_payload(), ACCESS_SECRET, algorithm="HS512")
        err = _failure(token, ACCESS_SECRET, TokenType.ACCESS)
        assert err.failure is VerificationFailure.BAD_SIGNATURE

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_unparseable_token_is_malformed(self, token):
        err = _failure(token, ACCESS_SECRET, TokenType.ACCESS)
        assert err.failure is VerificationFailure.MALFORMED

    @pytest.mark.parametrize("missing", ["jti", "sub", "iat", "exp"])
    def test_missing_claim_is_malformed(self, missing):
        token = jwt.encode(_payload(**{missing: None}), ACCESS_SECRET, algorithm="HS256")
        err = _failure(token, ACCESS_SECRET, TokenType.ACCESS)
        assert err.failure is VerificationFailure.MALFORMED

    def test_expired_token_keeps_verified_claims(self, issuer):
        past = datetime.now(UTC) - timedelta(minutes=20)
        stale = dataclasses.replace(issuer, clock=lambda: past)
        pair = stale.issue("u1")

        err = _failure(pair.access_token, ACCESS_SECRET, TokenType.ACCESS)

        assert err.failure is VerificationFailure.EXPIRED
        assert err.recoverable
        assert err.claims is not None
        assert err.claims.subject == "u1"
        assert err.claims.issued_at == pair.issued_at

    def test_expired_token_with_bad_signature_is_not_recoverable(self, issuer):
        past = datetime.now(UTC) - timedelta(minutes=20)
        pair = dataclasses.replace(issuer, clock=lambda: past).issue("u1")

        err = _failure(pair.access_token, REFRESH_SECRET, TokenType.ACCESS)
        assert err.failure is VerificationFailure.BAD_SIGNATURE


def test_issued_at_encoding_is_exact_to_the_microsecond():
    moment = datetime(2030, 12, 31, 23, 59, 59, 999999, tzinfo=UTC)
    assert decode_issued_at(encode_issued_at(moment)) == moment


def test_decode_issued_at_rejects_non_numbers():
    with pytest.raises(ValueError):
        decode_issued_at("yesterday")
