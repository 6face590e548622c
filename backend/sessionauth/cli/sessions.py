"""Flask CLI commands for operator-driven session revocation."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from sessionauth.api.deps import get_revocation
from sessionauth.services._shared.errors import NotFoundError, StoreUnavailableError

LOGGER = logging.getLogger(__name__)


@click.group("sessions")
def sessions_cli() -> None:
    """Inspect and revoke user sessions."""


@sessions_cli.command("revoke")
@click.argument("subject_id")
@click.option(
    "--credentials",
    is_flag=True,
    help="Also stamp credentials_changed_at so outstanding access tokens fail.",
)
@with_appcontext
def revoke(subject_id: str, credentials: bool) -> None:
    """Revoke the session of SUBJECT_ID."""
    revocation = get_revocation()
    try:
        if credentials:
            at = revocation.on_credential_change(subject_id)
            click.echo(f"Revoked all credentials of {subject_id} issued before {at.isoformat()}")
        else:
            removed = revocation.logout(subject_id)
            click.echo(
                f"Refresh record of {subject_id} removed"
                if removed
                else f"No refresh record for {subject_id}"
            )
    except NotFoundError as exc:
        raise click.ClickException(f"Unknown subject {subject_id}") from exc
    except StoreUnavailableError as exc:
        LOGGER.error("Refresh store unavailable during revocation", exc_info=True)
        raise click.ClickException("Refresh store unavailable") from exc
