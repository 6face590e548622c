"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, cast

from flask import Flask, current_app
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

from sessionauth.services._shared.errors import StoreUnavailableError
from sessionauth.services._shared.ports import (
    AccountMailer,
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
)

log = logging.getLogger(__name__)

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)

REFRESH_STORE_KEY = "refresh_store"
MAILER_KEY = "account_mailer"


def build_refresh_store(config: Mapping[str, Any]) -> RefreshTokenStore:
    """Construct the refresh store described by ``config``.

    Parameters
    ----------
    config: Mapping[str, Any]
        Application configuration. ``REDIS_URL`` selects Redis; when it is
        missing an in-memory store is returned, which is only suitable for a
        single development process.

    Returns
    -------
    RefreshTokenStore
        Opened store.

    Raises
    ------
    RuntimeError
        If Redis is configured but does not answer a ``PING``.
    """
    redis_url = config.get("REDIS_URL")
    if not redis_url:
        log.warning("REDIS_URL not set; refresh records are kept in process memory.")
        return InMemoryRefreshTokenStore()

    from sessionauth.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore

    store = RedisRefreshTokenStore.from_url(
        str(redis_url),
        timeout=float(config.get("REDIS_SOCKET_TIMEOUT", 0.5)),
    )
    try:
        store.ping()
    except StoreUnavailableError as exc:
        store.close()
        raise RuntimeError("Failed to connect to the refresh store at REDIS_URL") from exc
    return store


def init_app(
    app: Flask,
    *,
    refresh_store: RefreshTokenStore | None = None,
    mailer: AccountMailer | None = None,
) -> None:
    """Initialize SQLAlchemy, migrations and the injected collaborators.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`sessionauth.models` package so SQLAlchemy metadata is ready for
        migrations.
    refresh_store: RefreshTokenStore | None
        Pre-built store (tests, embedding). Built from config when ``None``.
    mailer: AccountMailer | None
        Delivery port for one-time account tokens. Defaults to the logging
        mailer.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from sessionauth import models as _models  # noqa: F401

    migrate.init_app(app, db)

    if mailer is None:
        from sessionauth.infra.mail.log_mailer import LogMailer

        mailer = LogMailer()

    app.extensions[REFRESH_STORE_KEY] = refresh_store or build_refresh_store(app.config)
    app.extensions[MAILER_KEY] = mailer


def get_refresh_store() -> RefreshTokenStore:
    """Return the refresh store bound to the current application."""
    store = current_app.extensions.get(REFRESH_STORE_KEY)
    if store is None:
        raise RuntimeError("Refresh store is not initialized. Call init_app() first.")
    return cast(RefreshTokenStore, store)


def get_mailer() -> AccountMailer:
    """Return the account mailer bound to the current application."""
    return cast(AccountMailer, current_app.extensions[MAILER_KEY])


def close_refresh_store(app: Flask) -> None:
    """Close and detach the refresh store of ``app`` (worker shutdown)."""
    store = app.extensions.pop(REFRESH_STORE_KEY, None)
    if store is not None:
        store.close()
