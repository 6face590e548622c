from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class AccountMailer(Protocol):
    """
    Delivery port for one-time account tokens.

    Rendering and transport (templates, SMTP, providers) live behind this port.
    """

    def send_verification(self, *, email: str, name: str, token: str) -> None: ...

    def send_password_reset(self, *, email: str, name: str, token: str) -> None: ...


@dataclass(frozen=True, slots=True)
class SentMessage:
    kind: str
    email: str
    token: str


@dataclass(slots=True)
class RecordingMailer(AccountMailer):
    """Mailer double keeping every message in memory (tests)."""

    outbox: list[SentMessage] = field(default_factory=list)

    def send_verification(self, *, email: str, name: str, token: str) -> None:
        self.outbox.append(SentMessage(kind="verification", email=email, token=token))

    def send_password_reset(self, *, email: str, name: str, token: str) -> None:
        self.outbox.append(SentMessage(kind="password_reset", email=email, token=token))

    def last(self, kind: str) -> SentMessage:
        """Return the most recent message of ``kind``."""
        for message in reversed(self.outbox):
            if message.kind == kind:
                return message
        raise LookupError(f"No {kind!r} message sent")
