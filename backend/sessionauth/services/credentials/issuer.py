from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from sessionauth.core.config import config_duration

from .dto import TokenPair, TokenType, encode_issued_at, utcnow

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CredentialIssuer:
    """
    Sign access/refresh pairs for a subject.

    Access and refresh credentials use distinct secrets and lifetimes, and
    carry a ``type`` claim, so a token valid under one secret is never
    accepted as the other. The issuer never touches the refresh store.

    :param access_secret: HMAC secret for access credentials.
    :param refresh_secret: HMAC secret for refresh credentials.
    :param access_ttl: Access lifetime.
    :param refresh_ttl: Refresh lifetime, strictly longer than ``access_ttl``.
    :param algorithm: Signing algorithm (HMAC family).
    :param clock: Returns the current aware UTC time.
    """

    access_secret: str
    refresh_secret: str
    access_ttl: timedelta
    refresh_ttl: timedelta
    algorithm: str = "HS256"
    clock: Callable[[], datetime] = field(default=utcnow, compare=False)

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Both signing secrets are required.")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh secrets must differ.")
        if self.access_ttl >= self.refresh_ttl:
            raise ValueError("Access TTL must be shorter than refresh TTL.")
        if not self.algorithm.startswith("HS"):
            raise ValueError(f"Unsupported signing algorithm: {self.algorithm}")

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any], *, clock: Callable[[], datetime] | None = None
    ) -> CredentialIssuer:
        """Build an issuer from Flask configuration keys."""
        return cls(
            access_secret=str(config["JWT_ACCESS_SECRET"]),
            refresh_secret=str(config["JWT_REFRESH_SECRET"]),
            access_ttl=config_duration(config, "JWT_ACCESS_EXPIRE"),
            refresh_ttl=config_duration(config, "JWT_REFRESH_EXPIRE"),
            algorithm=str(config.get("JWT_ALGORITHM", "HS256")),
            clock=clock or utcnow,
        )

    def issue(self, subject_id: str) -> TokenPair:
        """
        Issue a fresh pair for ``subject_id``.

        :param subject_id: Opaque subject identifier (``sub``).
        :returns: Both tokens, sharing one ``iat``.
        :rtype: TokenPair
        """
        if not subject_id:
            raise ValueError("subject_id is required")
        issued_at = self.clock().astimezone(UTC)
        access = self._sign(subject_id, TokenType.ACCESS, issued_at, self.access_ttl)
        refresh = self._sign(subject_id, TokenType.REFRESH, issued_at, self.refresh_ttl)
        log.debug("Issued credential pair", extra={"subject_id": subject_id})
        return TokenPair(
            access_token=access,
            refresh_token=refresh,
            issued_at=issued_at,
            access_ttl=self.access_ttl,
            refresh_ttl=self.refresh_ttl,
        )

    def _sign(
        self, subject_id: str, token_type: TokenType, issued_at: datetime, ttl: timedelta
    ) -> str:
        payload = {
            "sub": str(subject_id),
            "type": token_type.value,
            "iat": encode_issued_at(issued_at),
            "exp": int((issued_at + ttl).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.secret_for(token_type), algorithm=self.algorithm)

    def secret_for(self, token_type: TokenType) -> str:
        """Return the verification secret of ``token_type`` credentials."""
        return self.access_secret if token_type is TokenType.ACCESS else self.refresh_secret
