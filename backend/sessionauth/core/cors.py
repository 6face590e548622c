"""Cross-origin access to ``/api/*`` for browser clients holding credential cookies."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from sessionauth.core.logger import REQUEST_ID_HEADER


def allowed_origins(raw: str | None) -> list[str]:
    """Split the comma-separated ``CORS_ORIGINS`` setting; ``"*"`` means none are named."""
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    return [] if origins == ["*"] else origins


def init_app(app: Flask) -> None:
    """
    Install Flask-Cors on the API.

    Browsers only send ``accessToken``/``refreshToken`` cross-origin when the
    response names the origin and allows credentials. Without named origins the
    API stays reachable from anywhere, but cookie-based sessions only work
    same-origin (Bearer still works).
    """
    origins = allowed_origins(app.config.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins or "*"}},
        supports_credentials=bool(origins),
        expose_headers=[REQUEST_ID_HEADER],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
