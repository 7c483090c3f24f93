from __future__ import annotations

from datetime import timedelta

from flask import Flask, has_request_context, request, request_started, session


class FlaskSessionProxy:
    """
    Session capability set backed by a Flask app's cookie configuration.

    Cookie settings are app-wide in Flask, so once the app has started
    serving requests they count as already sent.
    """

    def __init__(self, app: Flask) -> None:
        self.app = app
        self._serving = False
        request_started.connect(self._request_started, app, weak=False)

    def _request_started(self, sender: Flask, **extra) -> None:
        self._serving = True

    def headers_sent(self) -> bool:
        return self._serving

    def session_get_id(self) -> str:
        if not has_request_context() or not session:
            return ""
        # Flask-Session exposes sid; the default cookie session only has the cookie
        sid = getattr(session, "sid", None)
        if sid:
            return str(sid)
        return request.cookies.get(self.app.config.get("SESSION_COOKIE_NAME", "session"), "")

    def session_set_name(self, name: str) -> None:
        self.app.config["SESSION_COOKIE_NAME"] = name

    def session_set_cookie_params(self, lifetime: int, path: str, domain: str,
                                  secure: bool, httponly: bool) -> None:
        self.app.config.update(
            PERMANENT_SESSION_LIFETIME=timedelta(seconds=lifetime),
            SESSION_COOKIE_PATH=path,
            SESSION_COOKIE_DOMAIN=domain or None,
            SESSION_COOKIE_SECURE=secure,
            SESSION_COOKIE_HTTPONLY=httponly,
        )
