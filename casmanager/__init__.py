# casmanager/__init__.py
import logging
import os
from urllib.parse import urlparse

from flask import Flask, request
from flask_session import Session
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import settings
from .manager import CasManager
from .options import CasOptions
from .session import FlaskSessionProxy
from .cas.routes import bp as cas_bp

def is_local_dev():
    env = str(getattr(settings, "ENV", os.getenv("FLASK_ENV", ""))).lower()
    base = str(getattr(settings, "BASE_URL", ""))
    host = urlparse(base).hostname or ""
    return (
        env in {"dev", "development", "local"}
        or host in {"localhost", "127.0.0.1"}
        or base.startswith("http://")
    )

_BASE_HOST = urlparse(getattr(settings, "BASE_URL", "")).hostname or ""

LOCAL_DEV = is_local_dev()

# ---- Security header values ----
CSP = (
    "default-src 'self'; "
    "base-uri 'self'; "
    "object-src 'none'; "
    "frame-ancestors 'self'; "
    "form-action 'self'; "
    "img-src 'self' data: https:; "
    "script-src 'self'; "
    "style-src 'self' 'unsafe-inline'"
)

def create_app(cas_config: dict | None = None) -> Flask:
    app = Flask(__name__)
    app.secret_key = settings.SESSION_SECRET

    config = dict(settings.cas_config() if cas_config is None else cas_config)
    # Secure cookies unless we're on plain-HTTP localhost
    config.setdefault("cas_session_secure", not LOCAL_DEV)
    options = CasOptions.from_mapping(config)

    app.config.update(
        SESSION_TYPE="filesystem",
        SESSION_FILE_DIR="/tmp/flask-sessions",
        SESSION_PERMANENT=False,
        SESSION_COOKIE_SAMESITE=("Lax" if LOCAL_DEV else "None"), # Lax for dev, None for prod
    )

    logger = None
    if options.cas_debug:
        logger = logging.getLogger("casmanager")
        logger.setLevel(logging.DEBUG)

    # Cookie name/params must be in place before Flask-Session reads them
    app.extensions["cas"] = CasManager(options, logger, session_proxy=FlaskSessionProxy(app))
    Session(app)

    # Trust reverse proxy ingress (X-Forwarded-*)
    if settings.TRUST_PROXY:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    app.register_blueprint(cas_bp, url_prefix="/cas")

    # Security headers on every response
    @app.after_request
    def set_security_headers(resp):
        resp.headers["Content-Security-Policy"] = CSP
        resp.headers["X-Frame-Options"] = "SAMEORIGIN"
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        xf_host = request.headers.get("X-Forwarded-Host", request.host.split(":")[0])
        xf_proto = request.headers.get("X-Forwarded-Proto", "http")

        # HSTS only when original request was HTTPS and host is your custom domain
        if not LOCAL_DEV and xf_proto == "https" and xf_host == _BASE_HOST:
            resp.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return resp

    from .utils.html import page
    @app.get("/")
    def index():
        return page(
            "CAS Manager",
            f"<p>Sign in through <b>CAS</b> at <code>{options.cas_hostname or '(not configured)'}</code>.</p>"
            f"<ul><li>Login: <code>/cas/login</code> → <code>/cas/user</code></li>"
            f"<li>Logout: <code>/cas/logout</code></li></ul>"
            f"<p><b>BASE_URL:</b> {settings.BASE_URL}</p>"
        )

    return app
