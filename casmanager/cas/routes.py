from __future__ import annotations

from cas import CASError
from flask import Blueprint, abort, current_app, redirect, request, url_for
from flask.typing import ResponseReturnValue
from markupsafe import escape

from ..utils.html import page, pretty_json

bp = Blueprint("cas", __name__)


def _manager():
    return current_app.extensions["cas"]


def _peer_addr() -> str:
    # ProxyFix rewrites remote_addr from X-Forwarded-For; SLO trusts only the socket peer
    orig = request.environ.get("werkzeug.proxy_fix.orig")
    if orig:
        return orig.get("REMOTE_ADDR") or ""
    return request.remote_addr or ""


def _error(title: str, ex: Exception) -> str:
    if _manager().options.cas_verbose_errors:
        return page(title, f"<p>CAS request failed:</p><pre>{escape(str(ex))}</pre>")
    return page(title, "<p>CAS request failed.</p>")


@bp.get("/login")
def login() -> ResponseReturnValue:
    # Redirects to the CAS server until a valid ticket comes back
    _manager().authenticate()
    return redirect(url_for("cas.user"))


@bp.get("/user")
def user() -> ResponseReturnValue:
    manager = _manager()
    if not manager.is_authenticated():
        return page("CAS User", "<p>Not signed in. <a href='/cas/login'>Login</a></p>")

    body = (
        f"<h2>CAS Profile</h2><p><b>User:</b> {escape(manager.user() or '')}</p>"
        "<h3>Attributes</h3><pre>" + str(escape(pretty_json(manager.get_attributes()))) + "</pre>"
    )
    if manager.is_masquerading():
        body += "<p style='color:#a00'><b>Note:</b> masquerading; CAS was not contacted.</p>"
    body += "<p><a href='/cas/logout'>CAS Logout</a></p>"
    return page("CAS User", body)


@bp.get("/logout")
def logout() -> ResponseReturnValue:
    _manager().logout(url=request.args.get("url", ""), service=request.args.get("service", ""))
    return redirect(url_for("index"))


@bp.post("/slo")
def single_logout() -> ResponseReturnValue:
    proxy = _manager().cas_proxy
    if not proxy.is_logout_request_allowed(_peer_addr()):
        abort(403)
    logout_request = request.form.get("logoutRequest")
    if not logout_request:
        abort(400)
    tickets = proxy.process_logout_request(logout_request)
    return {"revoked": len(tickets)}


@bp.get("/proxy/callback")
def proxy_callback() -> ResponseReturnValue:
    # CAS first calls without parameters to check the endpoint is reachable
    pgt_iou = request.args.get("pgtIou")
    pgt_id = request.args.get("pgtId")
    if pgt_iou and pgt_id:
        _manager().cas_proxy.store_pgt(pgt_iou, pgt_id)
    return "", 200


@bp.get("/proxy/ticket")
def proxy_ticket() -> ResponseReturnValue:
    manager = _manager()
    if not manager.is_authenticated():
        return page("CAS Proxy Ticket", "<p>Not signed in. <a href='/cas/login'>Login</a></p>")
    try:
        pt = manager.retrieve_proxy_ticket()
    except (CASError, RuntimeError) as ex:
        return _error("CAS Proxy Error", ex)
    return page("CAS Proxy Ticket", f"<pre class='code'>{escape(pt)}</pre>")
