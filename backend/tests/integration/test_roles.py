"""Role checks on the admin endpoints and role management from the CLI."""

from __future__ import annotations

import pytest
from sessionauth.core.extensions import get_refresh_store

from tests.helpers.http import REFRESH, bearer, register_verified, set_cookies
from tests.helpers.sessions import expired_session

ME = "/api/v1/auth/me"


def revoke_url(subject_id) -> str:
    return f"/api/v1/admin/sessions/{subject_id}/revoke"


def promote(app, email: str, role: str = "admin"):
    return app.test_cli_runner().invoke(args=["users", "set-role", email, role])


@pytest.fixture
def accounts(app, client, mailer):
    """An admin and a regular user, both signed in."""
    admin, admin_creds = register_verified(client, mailer, email="root@example.com", name="Root")
    user, user_creds = register_verified(client, mailer)
    assert promote(app, "root@example.com").exit_code == 0
    return (admin, admin_creds), (user, user_creds)


class TestRoleField:
    def test_new_accounts_are_users(self, client, mailer):
        user, creds = register_verified(client, mailer)

        assert user["role"] == "user"
        assert client.get(ME, headers=creds.as_cookies()).get_json()["data"]["role"] == "user"

    def test_set_role_command(self, app, client, mailer):
        _, creds = register_verified(client, mailer)

        result = promote(app, "ADA@example.com")

        assert result.exit_code == 0, result.output
        assert "ada@example.com is now admin" in result.output
        assert client.get(ME, headers=creds.as_cookies()).get_json()["data"]["role"] == "admin"

    def test_set_role_rejects_unknown_role(self, app, client, mailer):
        register_verified(client, mailer)
        result = promote(app, "ada@example.com", "root")
        assert result.exit_code == 2

    def test_set_role_unknown_user(self, app):
        result = promote(app, "ghost@example.com")
        assert result.exit_code == 1
        assert "Unknown user ghost@example.com" in result.output


class TestRestrictTo:
    def test_admin_revokes_another_session(self, app, client, accounts):
        (_, admin_creds), (user, user_creds) = accounts

        resp = client.post(revoke_url(user["id"]), headers=admin_creds.as_cookies())

        assert resp.status_code == 200
        assert resp.get_json()["data"] == {"subject_id": str(user["id"]), "removed": True}
        with app.app_context():
            assert get_refresh_store().get(str(user["id"])) is None

    def test_admin_revokes_credentials(self, client, accounts):
        (_, admin_creds), (user, user_creds) = accounts

        resp = client.post(
            revoke_url(user["id"]), json={"credentials": True}, headers=bearer(admin_creds.access)
        )

        assert resp.status_code == 200
        assert "revoked_before" in resp.get_json()["data"]
        assert client.get(ME, headers=user_creds.as_cookies()).status_code == 401

    def test_regular_user_is_forbidden(self, app, client, accounts):
        (admin, _), (_, user_creds) = accounts

        resp = client.post(revoke_url(admin["id"]), headers=user_creds.as_cookies())

        assert resp.status_code == 403
        assert resp.mimetype == "application/problem+json"
        body = resp.get_json()
        assert body["code"] == "forbidden"
        assert body["detail"] == "You do not have permission to perform this action"
        assert "Set-Cookie" not in resp.headers
        with app.app_context():
            assert get_refresh_store().get(str(admin["id"])) is not None

    def test_session_is_checked_before_role(self, client, accounts):
        (admin, _), _ = accounts
        assert client.post(revoke_url(admin["id"])).status_code == 401

    def test_demotion_applies_to_issued_credentials(self, app, client, accounts):
        (admin, admin_creds), (user, _) = accounts
        assert promote(app, "root@example.com", "user").exit_code == 0

        resp = client.post(revoke_url(user["id"]), headers=admin_creds.as_cookies())

        assert resp.status_code == 403

    def test_forbidden_response_still_carries_rotated_pair(self, app, client, accounts):
        (_, _), (user, _) = accounts
        old = expired_session(app, str(user["id"]))

        resp = client.post(revoke_url(user["id"]), headers=old.as_cookies())

        assert resp.status_code == 403
        assert set_cookies(resp)[REFRESH].value not in ("", old.refresh)

    def test_unknown_subject_with_credentials(self, client, accounts):
        (_, admin_creds), _ = accounts

        resp = client.post(
            revoke_url(999), json={"credentials": True}, headers=admin_creds.as_cookies()
        )

        assert resp.status_code == 404
