"""Session verification, implicit refresh and revocation."""

from .authenticator import SessionAuthenticator
from .dto import SessionOutcome, SessionState, Subject
from .revocation import RevocationManager

__all__ = [
    "RevocationManager",
    "SessionAuthenticator",
    "SessionOutcome",
    "SessionState",
    "Subject",
]
