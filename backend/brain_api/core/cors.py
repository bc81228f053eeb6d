"""CORS policy for the browser client of the API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from brain_api.core.logger import REQUEST_ID_HEADER

# Bearer tokens travel in ``Authorization``; no cookies are involved.
ALLOWED_HEADERS = ["Authorization", "Content-Type", REQUEST_ID_HEADER]


def init_app(app: Flask) -> None:
    """Allow the configured front-end origins to call ``/api/*``.

    ``CORS_ORIGINS`` is a comma-separated list; blank or ``"*"`` means any
    origin. The request id header is exposed so the client can quote it
    when reporting a failed call.
    """
    origins = [o.strip() for o in app.config.get("CORS_ORIGINS", "").split(",") if o.strip()]
    if not origins or origins == ["*"]:
        origins = ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        allow_headers=ALLOWED_HEADERS,
        expose_headers=[REQUEST_ID_HEADER],
        supports_credentials=False,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
