"""User repository for identity lookups."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from sessionauth.models.user import User, one_time_digest
from sessionauth.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER issues credentials or touches the refresh store; only DB-level
    user management.
    """

    model = User

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists."""
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def get_by_subject_id(self, subject_id: str) -> User | None:
        """Resolve the opaque subject id carried in credentials.

        Non-numeric ids resolve to ``None`` instead of raising.
        """
        try:
            user_id = int(subject_id)
        except (TypeError, ValueError):
            return None
        return self.get(user_id)

    def get_by_verification_token(self, token: str) -> User | None:
        """Find the user holding the digest of a raw verification token."""
        stmt = select(User).where(User.verification_token_hash == one_time_digest(token))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_reset_token(self, token: str) -> User | None:
        """Find the user holding the digest of a raw password reset token."""
        stmt = select(User).where(User.reset_token_hash == one_time_digest(token))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Credential ops ----------------------------

    def authenticate(self, email: str, password: str) -> User | None:
        """Authenticate a user by email and password.

        :returns: Authenticated user or ``None`` when credentials fail.
        :rtype: User | None
        """
        user = self.get_by_email(email)
        if not user or not user.verify_password(password):
            return None
        return user
