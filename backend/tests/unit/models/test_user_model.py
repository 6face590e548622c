"""Tests for the User model."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sessionauth.models.user import User, one_time_digest
from sqlalchemy.exc import IntegrityError


def _user(email="Ada@Example.com", name=" Ada ") -> User:
    u = User(email=email, name=name)
    u.password = "secret123"
    return u


class TestUser:
    def test_password_hashing(self, session):
        u = _user()
        session.add(u)
        session.commit()
        assert u.password_hash != "secret123"
        assert u.verify_password("secret123") is True
        assert u.verify_password("wrong") is False

    def test_password_is_write_only(self):
        u = _user()
        with pytest.raises(AttributeError):
            _ = u.password

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            User(email="a@example.com", name="A").password = ""

    def test_email_and_name_normalized(self):
        u = _user()
        assert u.email == "ada@example.com"
        assert u.name == "Ada"

    def test_email_unique(self, session):
        session.add(_user())
        session.commit()

        session.add(_user(email="ADA@example.com"))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    @pytest.mark.parametrize("email", ["", "no-at-sign", "user@localhost"])
    def test_malformed_email_rejected(self, email):
        with pytest.raises(ValueError):
            User(email=email, name="x")

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            User(email="a@example.com", name="   ")

    def test_subject_id_is_string_pk(self, user_factory):
        u = user_factory()
        assert u.subject_id == str(u.id)

    def test_role_defaults_to_user(self, session):
        u = _user()
        session.add(u)
        session.commit()
        assert u.role == "user"

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            _user().role = "superuser"


class TestCredentialStamp:
    def test_change_password_clears_reset_token(self):
        u = _user()
        u.start_password_reset(timedelta(minutes=10))

        u.change_password("another-secret")

        assert u.verify_password("another-secret")
        assert u.reset_token_hash is None
        assert u.reset_token_expires_at is None
        assert u.credentials_changed_at is None

    def test_stamp_round_trips_with_microseconds(self, session):
        at = datetime(2026, 4, 2, 8, 15, 30, 654321, tzinfo=UTC)
        u = _user()
        assert u.mark_credentials_changed(at=at) == at
        session.add(u)
        session.commit()
        session.expire_all()

        reloaded = session.get(User, u.id)
        assert reloaded.credentials_changed_at == at
        assert reloaded.credentials_changed_at.tzinfo is not None


class TestOneTimeTokens:
    NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def test_verification_keeps_only_digest(self):
        u = _user()
        token = u.start_email_verification(timedelta(hours=1), now=self.NOW)

        assert u.verification_token_hash == one_time_digest(token)
        assert token not in u.verification_token_hash
        assert u.verification_token_expires_at == self.NOW + timedelta(hours=1)

    def test_confirm_email_within_ttl(self):
        u = _user()
        u.start_email_verification(timedelta(hours=1), now=self.NOW)

        assert u.confirm_email(now=self.NOW + timedelta(minutes=59)) is True
        assert u.is_verified is True
        assert u.verification_token_hash is None

    def test_confirm_email_after_ttl(self):
        u = _user()
        u.is_verified = False
        u.start_email_verification(timedelta(hours=1), now=self.NOW)

        assert u.confirm_email(now=self.NOW + timedelta(hours=1)) is False
        assert u.is_verified is False

    def test_reset_token_validity_window(self):
        u = _user()
        u.start_password_reset(timedelta(minutes=10), now=self.NOW)

        assert u.reset_token_valid(now=self.NOW + timedelta(minutes=9)) is True
        assert u.reset_token_valid(now=self.NOW + timedelta(minutes=10)) is False
