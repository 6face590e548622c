"""User model definition for the session service."""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates
from werkzeug.security import check_password_hash, generate_password_hash

from sessionauth.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, UTCDateTime, utcnow


#: Roles a user may hold; new accounts get ``"user"``.
ROLES = ("user", "admin")
DEFAULT_ROLE = "user"


def one_time_digest(token: str) -> str:
    """Return the SHA-256 hex digest stored for a one-time account token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity and the subject of issued credentials.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    name : str
        Display name.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    is_verified : bool
        Whether the email address was confirmed.
    role : str
        Authorization role, one of :data:`ROLES`.
    credentials_changed_at : datetime | None
        Last password change/reset or forced revocation. Access credentials
        issued before this instant are rejected.
    last_login_at : datetime | None
        Last successful password login.
    verification_token_hash, verification_token_expires_at
        Digest and expiry of the pending email verification token.
    reset_token_hash, reset_token_expires_at
        Digest and expiry of the pending password reset token.
    """

    __tablename__ = "users"

    # Columns
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=DEFAULT_ROLE)
    credentials_changed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    verification_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    verification_token_expires_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    reset_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    # Constraints & indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email", "email"),
        Index("ix_users_verification_token_hash", "verification_token_hash"),
        Index("ix_users_reset_token_hash", "reset_token_hash"),
    )

    @property
    def subject_id(self) -> str:
        """Opaque subject identifier carried in issued credentials."""
        return str(self.id)

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :type raw: str
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        if not self.password_hash:
            return False
        return bool(check_password_hash(self.password_hash, raw))

    def change_password(self, raw: str) -> None:
        """
        Set a new password and discard any pending reset token.

        Session revocation is stamped separately through
        :meth:`mark_credentials_changed`.
        """
        self.password = raw
        self.reset_token_hash = None
        self.reset_token_expires_at = None

    def mark_credentials_changed(self, *, at: datetime | None = None) -> datetime:
        """Stamp the revocation instant and return it."""
        stamp = at or utcnow()
        self.credentials_changed_at = stamp
        return stamp

    # -------------------- One-time tokens --------------------
    def start_email_verification(self, ttl: timedelta, *, now: datetime | None = None) -> str:
        """
        Create a verification token and keep only its digest.

        :param ttl: Token lifetime.
        :returns: The raw token to deliver to the user.
        """
        token = secrets.token_urlsafe(32)
        self.verification_token_hash = one_time_digest(token)
        self.verification_token_expires_at = (now or utcnow()) + ttl
        return token

    def confirm_email(self, *, now: datetime | None = None) -> bool:
        """
        Mark the email verified if the pending token is still valid.

        :returns: ``False`` when the token expired.
        """
        expires_at = self.verification_token_expires_at
        if expires_at is None or expires_at <= (now or utcnow()):
            return False
        self.is_verified = True
        self.verification_token_hash = None
        self.verification_token_expires_at = None
        return True

    def start_password_reset(self, ttl: timedelta, *, now: datetime | None = None) -> str:
        """Create a password reset token and return it raw."""
        token = secrets.token_urlsafe(32)
        self.reset_token_hash = one_time_digest(token)
        self.reset_token_expires_at = (now or utcnow()) + ttl
        return token

    def reset_token_valid(self, *, now: datetime | None = None) -> bool:
        expires_at = self.reset_token_expires_at
        return expires_at is not None and expires_at > (now or utcnow())

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("role")
    def _check_role(self, key: str, value: str) -> str:
        if value not in ROLES:
            raise ValueError(f"Unknown role: {value!r}")
        return value

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()
