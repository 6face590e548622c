# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass

import redis  # type: ignore[import-untyped]

from sessionauth.services._shared.errors import StoreUnavailableError
from sessionauth.services._shared.ports import (
    RefreshTokenStore,
    digests_match,
    hash_token,
    refresh_key,
)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    One string key per subject (``refresh:<subject_id>``) holds the SHA-256
    digest of the current refresh token. Rotation is a single ``SET ... EX``,
    so concurrent rotations resolve as last-write-wins without scripts or
    ``WATCH``.

    :param r: A Redis client (already configured with socket timeouts).
    """

    r: redis.Redis

    @classmethod
    def from_url(cls, url: str, *, timeout: float = 0.5) -> RedisRefreshTokenStore:
        """
        Build a store whose every call is bounded by ``timeout`` seconds.

        :param url: Redis connection URL.
        :param timeout: Socket and connect timeout in seconds.
        """
        client = redis.Redis.from_url(
            url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
            retry_on_timeout=False,
        )
        return cls(r=client)

    # -------------------- API ------------------------

    def put(self, subject_id: str, token: str, ttl_seconds: int) -> None:
        try:
            self.r.set(refresh_key(subject_id), hash_token(token), ex=max(1, int(ttl_seconds)))
        except redis.RedisError as exc:
            raise StoreUnavailableError("Refresh store write failed") from exc

    def get(self, subject_id: str) -> str | None:
        try:
            raw = self.r.get(refresh_key(subject_id))
        except redis.RedisError as exc:
            raise StoreUnavailableError("Refresh store read failed") from exc
        if raw is None:
            return None
        return raw.decode() if isinstance(raw, bytes | bytearray) else str(raw)

    def matches(self, subject_id: str, token: str) -> bool:
        return digests_match(self.get(subject_id), token)

    def delete(self, subject_id: str) -> bool:
        try:
            return bool(self.r.delete(refresh_key(subject_id)))
        except redis.RedisError as exc:
            raise StoreUnavailableError("Refresh store delete failed") from exc

    def ping(self) -> bool:
        """
        Check connectivity.

        :raises StoreUnavailableError: When Redis does not answer in time.
        """
        try:
            return bool(self.r.ping())
        except redis.RedisError as exc:
            raise StoreUnavailableError("Refresh store did not answer PING") from exc

    def close(self) -> None:
        self.r.close()
