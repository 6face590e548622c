"""Flask CLI commands for user administration."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from sessionauth.api.deps import get_account_service
from sessionauth.models.user import ROLES
from sessionauth.services._shared.errors import NotFoundError


@click.group("users")
def users_cli() -> None:
    """Manage user accounts."""


@users_cli.command("set-role")
@click.argument("email")
@click.argument("role", type=click.Choice(ROLES))
@with_appcontext
def set_role(email: str, role: str) -> None:
    """Give the user registered with EMAIL the ROLE."""
    try:
        user = get_account_service().set_role(email, role)
    except NotFoundError as exc:
        raise click.ClickException(f"Unknown user {email}") from exc
    click.echo(f"{user.email} is now {user.role}")
