from datetime import timedelta

import pytest
from flask import Flask, session

from casmanager.session import FlaskSessionProxy


@pytest.fixture
def app():
    app = Flask(__name__)
    app.secret_key = "test-secret"

    @app.get("/ping")
    def ping():
        return "pong"

    return app


def test_headers_not_sent_until_app_serves(app):
    proxy = FlaskSessionProxy(app)
    assert proxy.headers_sent() is False

    app.test_client().get("/ping")

    assert proxy.headers_sent() is True


def test_session_id_empty_outside_request(app):
    assert FlaskSessionProxy(app).session_get_id() == ""


def test_session_id_empty_for_new_session(app):
    proxy = FlaskSessionProxy(app)
    with app.test_request_context("/"):
        assert proxy.session_get_id() == ""


def test_session_id_from_cookie_for_active_session(app):
    proxy = FlaskSessionProxy(app)
    with app.test_request_context("/", headers={"Cookie": "session=abc123"}):
        session["cas_user"] = "alice"
        assert proxy.session_get_id() == "abc123"


def test_sets_session_name_and_cookie_params(app):
    proxy = FlaskSessionProxy(app)

    proxy.session_set_name("CASAuth")
    proxy.session_set_cookie_params(7200, "/", "", True, True)

    assert app.config["SESSION_COOKIE_NAME"] == "CASAuth"
    assert app.config["PERMANENT_SESSION_LIFETIME"] == timedelta(seconds=7200)
    assert app.config["SESSION_COOKIE_PATH"] == "/"
    assert app.config["SESSION_COOKIE_DOMAIN"] is None
    assert app.config["SESSION_COOKIE_SECURE"] is True
    assert app.config["SESSION_COOKIE_HTTPONLY"] is True
