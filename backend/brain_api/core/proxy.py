"""Reverse-proxy awareness for client addresses."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`~werkzeug.middleware.proxy_fix.ProxyFix`.

    Session device info records ``request.remote_addr``; behind a proxy that
    address must come from ``X-Forwarded-For``. ``PROXY_HOPS`` is the number
    of trusted proxies in front of the app (``0`` disables the middleware).
    """
    hops = int(app.config.get("PROXY_HOPS", 1))
    if hops <= 0:
        return
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)
