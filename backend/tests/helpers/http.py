"""HTTP helper utilities for tests driving the session cookies by hand."""

from __future__ import annotations

from dataclasses import dataclass

from werkzeug.test import TestResponse

ACCESS = "accessToken"
REFRESH = "refreshToken"

PASSWORD = "Sup3r-secret!"


@dataclass(frozen=True)
class SetCookie:
    """One parsed ``Set-Cookie`` header."""

    name: str
    value: str
    attributes: dict[str, str]

    @property
    def cleared(self) -> bool:
        return self.value == "" and self.attributes.get("max-age") == "0"


def set_cookies(response: TestResponse) -> dict[str, SetCookie]:
    """Return the ``Set-Cookie`` headers of ``response`` keyed by cookie name."""

    parsed: dict[str, SetCookie] = {}
    for header in response.headers.getlist("Set-Cookie"):
        pair, *attrs = [part.strip() for part in header.split(";")]
        name, _, value = pair.partition("=")
        attributes: dict[str, str] = {}
        for attr in attrs:
            key, _, val = attr.partition("=")
            attributes[key.lower()] = val
        parsed[name] = SetCookie(name=name, value=value.strip('"'), attributes=attributes)
    return parsed


def cookie_header(access: str | None = None, refresh: str | None = None) -> dict[str, str]:
    """Build a ``Cookie`` request header carrying the given credentials."""

    parts = []
    if access is not None:
        parts.append(f"{ACCESS}={access}")
    if refresh is not None:
        parts.append(f"{REFRESH}={refresh}")
    return {"Cookie": "; ".join(parts)} if parts else {}


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@dataclass(frozen=True)
class Credentials:
    access: str
    refresh: str

    @classmethod
    def from_response(cls, response: TestResponse) -> Credentials:
        cookies = set_cookies(response)
        return cls(access=cookies[ACCESS].value, refresh=cookies[REFRESH].value)

    def as_cookies(self) -> dict[str, str]:
        return cookie_header(self.access, self.refresh)


def register_verified(client, mailer, *, email: str = "ada@example.com", name: str = "Ada"):
    """Register ``email``, confirm it and return ``(user_json, Credentials)``."""

    resp = client.post(
        "/api/v1/auth/register", json={"name": name, "email": email, "password": PASSWORD}
    )
    assert resp.status_code == 201, resp.get_json()
    token = mailer.last("verification").token
    resp = client.get(f"/api/v1/auth/verify-email?token={token}")
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"], Credentials.from_response(resp)
