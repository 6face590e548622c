from __future__ import annotations

import logging
from dataclasses import dataclass

from sessionauth.services._shared.ports import AccountMailer

log = logging.getLogger(__name__)


def _mask(email: str) -> str:
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}" if domain else "***"


@dataclass(slots=True)
class LogMailer(AccountMailer):
    """
    Default mailer: records that a message was dispatched, nothing else.

    Token values are never written to the log.
    """

    def send_verification(self, *, email: str, name: str, token: str) -> None:
        log.info("Verification email dispatched to %s", _mask(email))

    def send_password_reset(self, *, email: str, name: str, token: str) -> None:
        log.info("Password reset email dispatched to %s", _mask(email))
