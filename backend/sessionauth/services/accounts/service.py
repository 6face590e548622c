"""
AccountService
==============

Account flows that create or end sessions:

- Registration with email verification
- Password login
- Email verification and password reset through one-time tokens
- Password change (revokes every older credential)
- Logout

Every flow that authenticates the user issues a fresh pair through
:class:`CredentialIssuer` and records its refresh token in the store.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from sessionauth.models.base import utcnow
from sessionauth.models.user import User
from sessionauth.services._shared.base import BaseService
from sessionauth.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    MailDeliveryError,
    NotFoundError,
    OneTimeTokenError,
    UnverifiedAccountError,
    violates,
)
from sessionauth.services._shared.ports import AccountMailer, RefreshTokenStore
from sessionauth.services.credentials import CredentialIssuer, TokenPair
from sessionauth.services.session import RevocationManager

from .dto import AuthResult, LoginIn, PasswordChangeIn, RegisterIn, UserOut

log = logging.getLogger(__name__)

INVALID_ONE_TIME_TOKEN = "Token is invalid or has expired"


def _to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        is_verified=user.is_verified,
        role=user.role,
        last_login_at=user.last_login_at,
    )


class AccountService(BaseService):
    """
    Application service for account and session entry/exit flows.

    :param issuer: Signs new credential pairs.
    :param store: Refresh store receiving each new refresh token.
    :param revocation: Logout and credential-change revocation.
    :param mailer: Delivery of one-time tokens.
    :param verification_ttl: Lifetime of email verification tokens.
    :param reset_ttl: Lifetime of password reset tokens.
    """

    def __init__(
        self,
        *,
        issuer: CredentialIssuer,
        store: RefreshTokenStore,
        revocation: RevocationManager,
        mailer: AccountMailer,
        verification_ttl: timedelta,
        reset_ttl: timedelta,
    ) -> None:
        self.issuer = issuer
        self.store = store
        self.revocation = revocation
        self.mailer = mailer
        self.verification_ttl = verification_ttl
        self.reset_ttl = reset_ttl

    # --------------------------------------------------------------------- #
    # Session entry
    # --------------------------------------------------------------------- #

    def _start_session(self, subject_id: str) -> TokenPair:
        """Issue a pair and make its refresh token the subject's current one."""
        pair = self.issuer.issue(subject_id)
        self.store.put(subject_id, pair.refresh_token, pair.refresh_max_age)
        return pair

    def register(self, dto: RegisterIn) -> AuthResult:
        """
        Create an unverified user, send the verification token and sign in.

        :raises ConflictError: When the email is already registered.
        :raises MailDeliveryError: When the verification email fails.
        """
        with self.rw_uow() as uow:
            repo = uow.users
            if repo.exists_by_email(dto.email):
                raise ConflictError("User", "email already in use")
            try:
                user = repo.model(email=dto.email, name=dto.name, is_verified=False)
                user.password = dto.password
                token = user.start_email_verification(self.verification_ttl)
                repo.add(user)
            except IntegrityError as exc:
                if violates(exc, "uq_users_email"):
                    raise ConflictError("User", "email already in use") from exc
                raise
            out = _to_user_out(user)

        self.mailer.send_verification(email=out.email, name=out.name, token=token)
        pair = self._start_session(str(out.id))
        log.info("User registered", extra={"subject_id": str(out.id)})
        return AuthResult(user=out, pair=pair)

    def login(self, dto: LoginIn) -> AuthResult:
        """
        Check a password login and sign in.

        :raises InvalidCredentialsError: Unknown email or wrong password.
        :raises UnverifiedAccountError: Email not confirmed yet.
        """
        with self.rw_uow() as uow:
            user = uow.users.authenticate(dto.email, dto.password)
            if user is None:
                raise InvalidCredentialsError("Incorrect email or password")
            if not user.is_verified:
                raise UnverifiedAccountError("Please verify your email first")
            user.last_login_at = utcnow()
            out = _to_user_out(user)

        pair = self._start_session(str(out.id))
        log.info("User logged in", extra={"subject_id": str(out.id), "outcome": "login"})
        return AuthResult(user=out, pair=pair)

    def verify_email(self, token: str) -> AuthResult:
        """
        Consume a verification token, mark the email verified and sign in.

        :raises OneTimeTokenError: Unknown or expired token.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_verification_token(token) if token else None
            if user is None or not user.confirm_email():
                raise OneTimeTokenError(INVALID_ONE_TIME_TOKEN)
            out = _to_user_out(user)

        return AuthResult(user=out, pair=self._start_session(str(out.id)))

    # --------------------------------------------------------------------- #
    # Password lifecycle
    # --------------------------------------------------------------------- #

    def forgot_password(self, email: str) -> None:
        """
        Create and send a reset token when ``email`` belongs to a user.

        Unknown emails are ignored so the response never reveals whether an
        account exists.

        :raises MailDeliveryError: When sending fails; the token is discarded.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                return
            token = user.start_password_reset(self.reset_ttl)
            user_id, address, name = user.id, user.email, user.name

        try:
            self.mailer.send_password_reset(email=address, name=name, token=token)
        except MailDeliveryError:
            with self.rw_uow() as uow:
                user = uow.users.get(user_id)
                if user is not None:
                    user.reset_token_hash = None
                    user.reset_token_expires_at = None
            raise

    def reset_password(self, token: str, new_password: str) -> AuthResult:
        """
        Consume a reset token, set the password, revoke older sessions and
        sign in.

        :raises OneTimeTokenError: Unknown or expired token.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_reset_token(token) if token else None
            if user is None or not user.reset_token_valid():
                raise OneTimeTokenError(INVALID_ONE_TIME_TOKEN)
            user.change_password(new_password)
            out = _to_user_out(user)

        return self._after_credential_change(out)

    def change_password(self, subject_id: str, dto: PasswordChangeIn) -> AuthResult:
        """
        Replace the password of an authenticated subject.

        :raises NotFoundError: Unknown subject.
        :raises InvalidCredentialsError: Wrong current password.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_subject_id(subject_id)
            if user is None:
                raise NotFoundError("User", subject_id)
            if not user.verify_password(dto.current_password):
                raise InvalidCredentialsError("Your current password is incorrect")
            user.change_password(dto.new_password)
            out = _to_user_out(user)

        return self._after_credential_change(out)

    def _after_credential_change(self, out: UserOut) -> AuthResult:
        subject_id = str(out.id)
        self.revocation.on_credential_change(subject_id)
        return AuthResult(user=out, pair=self._start_session(subject_id))

    # --------------------------------------------------------------------- #
    # Session exit & retrieval
    # --------------------------------------------------------------------- #

    def logout(self, subject_id: str) -> None:
        self.revocation.logout(subject_id)

    def set_role(self, email: str, role: str) -> UserOut:
        """
        Grant ``role`` to the user registered with ``email``.

        Takes effect on the user's next request; issued credentials are kept.

        :raises NotFoundError: Unknown email.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            user.role = role
            out = _to_user_out(user)

        log.info("Role changed", extra={"subject_id": str(out.id), "outcome": f"role:{role}"})
        return out

    def get_user(self, subject_id: str) -> UserOut:
        """
        Retrieve the user behind ``subject_id``.

        :raises NotFoundError: If the user does not exist.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_subject_id(subject_id)
            if user is None:
                raise NotFoundError("User", subject_id)
            return _to_user_out(user)
