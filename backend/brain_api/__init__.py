"""Second Brain API backend.

Exposes :func:`brain_api.factory.create_app` at package level so WSGI servers
and the Flask CLI can use ``brain_api:create_app()`` directly.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
