from __future__ import annotations

import logging
import socket
import time
from typing import Any, Dict, Hashable, List, Mapping, Sequence, Tuple
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from cas import CASClient
from flask import abort, redirect, request, session

from ..options import ClientRole

CAS_VERSIONS = {"1.0": 1, "2.0": 2, "3.0": 3}
SAML_VERSION = "CAS_2_SAML_1_0"

PROXY_CALLBACK_PATH = "/cas/proxy/callback"

SESSION_USER = "cas_user"
SESSION_ATTRIBUTES = "cas_attributes"
SESSION_TICKET = "cas_ticket"
SESSION_PGT_IOU = "cas_pgt_iou"
SESSION_GATEWAYED = "cas_gatewayed"


class _TTLCache:
    """Expiring ticket store; expired entries are swept on every insert."""

    def __init__(self, ttl: int = 600):
        self.ttl = ttl
        self._s: Dict[str, Tuple[float, Any]] = {}

    def __len__(self) -> int:
        return len(self._s)

    def get(self, k: str):
        v = self._s.get(k)
        if not v:
            return None
        exp, val = v
        if time.time() > exp:
            self._s.pop(k, None)
            return None
        return val

    def set(self, k: str, val: Any):
        now = time.time()
        for key in [key for key, (exp, _) in self._s.items() if now > exp]:
            del self._s[key]
        self._s[k] = (now + self.ttl, val)

# pgtIou -> pgtId, filled by the proxy callback
pgt_cache = _TTLCache()
# service tickets revoked by SAML single logout
revoked_tickets = _TTLCache(ttl=8 * 3600)


class CasClientProxy:
    """
    CAS client capability set on top of python-cas.

    Configuration calls only record state; the python-cas client is built per
    request (the service URL depends on the request), so calls can come in any
    order before the first login.
    """

    def __init__(self) -> None:
        self.logger: logging.Logger | None = None
        self.verbose = False
        self.server_type: Hashable | None = None
        self.role: ClientRole | None = None
        self.server_url = ""
        self.client_service = ""
        self.control_session = False
        self.verify: bool | str = True
        self.validate_cn = True
        self.server_login_url: str | None = None
        self.server_logout_url: str | None = None
        self.fixed_service_url: str | None = None
        self.check_logout_client: bool | None = None
        self.real_hosts: List[str] = []

    # ---- configuration ----

    def set_logger(self, logger: logging.Logger) -> None:
        self.logger = logger

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = verbose

    def server_type_cas(self, version: str) -> Hashable:
        v = str(version).strip()
        if v in CAS_VERSIONS:
            return CAS_VERSIONS[v]
        if v.isdigit() and int(v) in CAS_VERSIONS.values():
            return int(v)
        raise ValueError(f"Unsupported CAS protocol version: {version!r}")

    def server_type_saml(self) -> Hashable:
        return SAML_VERSION

    def client(self, server_type: Hashable, hostname: str, port: int, uri: str,
               service: str, control_session: bool) -> None:
        self._init(ClientRole.CLIENT, server_type, hostname, port, uri, service, control_session)

    def proxy(self, server_type: Hashable, hostname: str, port: int, uri: str,
              service: str, control_session: bool) -> None:
        self._init(ClientRole.PROXY, server_type, hostname, port, uri, service, control_session)

    def _init(self, role: ClientRole, server_type: Hashable, hostname: str, port: int,
              uri: str, service: str, control_session: bool) -> None:
        if self.role is not None:
            raise RuntimeError(f"CAS client already initialized as {self.role.value}")
        if not hostname:
            raise ValueError("CAS hostname is required")
        if role is ClientRole.PROXY and server_type == CAS_VERSIONS["1.0"]:
            raise ValueError("CAS proxies are not supported by CAS 1.0")
        netloc = hostname if int(port) == 443 else f"{hostname}:{int(port)}"
        path = uri.strip("/")
        self.server_url = f"https://{netloc}/{path}/" if path else f"https://{netloc}/"
        self.role = role
        self.server_type = server_type
        self.client_service = service.rstrip("/")
        self.control_session = control_session
        self.log(f"CAS {role.value} initialized for {self.server_url} (protocol {server_type})")

    def handle_logout_requests(self, check_client: bool, allowed_clients: Sequence[str]) -> None:
        self.check_logout_client = check_client
        self.real_hosts = list(allowed_clients)

    def set_no_cas_server_validation(self) -> None:
        self.verify = False

    def set_cas_server_ca_cert(self, path: str, validate_cn: bool) -> None:
        if not path:
            raise ValueError("CAS server validation requires a CA certificate path")
        self.verify = path
        self.validate_cn = validate_cn
        if not validate_cn:
            # requests always checks the hostname against the certificate
            self.log("cas_validate_cn=false has no effect; hostnames are always verified")

    def set_server_login_url(self, url: str) -> None:
        self.server_login_url = url

    def set_server_logout_url(self, url: str) -> None:
        self.server_logout_url = url

    def set_fixed_service_url(self, url: str) -> None:
        self.fixed_service_url = url

    # ---- URLs ----

    @property
    def proxy_callback_url(self) -> str:
        return self.client_service + PROXY_CALLBACK_PATH

    def service_url(self) -> str:
        """Fixed service URL, else the current request URL without its ticket."""
        if self.fixed_service_url:
            return self.fixed_service_url
        query = urlencode([(k, v) for k, v in parse_qsl(request.query_string.decode(), keep_blank_values=True)
                           if k != "ticket"])
        base = urlsplit(self.client_service or request.host_url)
        return urlunsplit((base.scheme, base.netloc, request.path, query, ""))

    def get_login_url(self, **extra: str) -> str:
        base = self.server_login_url or urljoin(self.server_url, "login")
        return f"{base}?{urlencode({'service': self.service_url(), **extra})}"

    def get_logout_url(self, params: Mapping[str, str] | None = None) -> str:
        base = self.server_logout_url or urljoin(self.server_url, "logout")
        return f"{base}?{urlencode(dict(params))}" if params else base

    def cas_client(self):
        if self.role is None:
            raise RuntimeError("CAS client not initialized; call client() or proxy() first.")
        kwargs: Dict[str, Any] = {
            "version": self.server_type,
            "service_url": self.service_url(),
            "server_url": self.server_url,
            "verify_ssl_certificate": self.verify,
        }
        if self.role is ClientRole.PROXY:
            kwargs["proxy_callback"] = self.proxy_callback_url
        return CASClient(**kwargs)

    # ---- request time ----

    def _validate_ticket(self, ticket: str) -> bool:
        user, attributes, pgt_iou = self.cas_client().verify_ticket(ticket)
        if not user:
            self.log(f"Ticket {ticket} rejected by CAS server")
            return False
        if self.control_session:
            session.clear()
        session[SESSION_USER] = user
        session[SESSION_ATTRIBUTES] = dict(attributes or {})
        session[SESSION_TICKET] = ticket
        if pgt_iou:
            session[SESSION_PGT_IOU] = pgt_iou
        self.log(f"Ticket validated for user {user}")
        return True

    def is_session_authenticated(self) -> bool:
        if SESSION_USER not in session:
            return False
        if revoked_tickets.get(session.get(SESSION_TICKET, "")):
            self.log(f"Session for {session[SESSION_USER]} ended by single logout")
            session.clear()
            return False
        return True

    def is_authenticated(self) -> bool:
        if self.is_session_authenticated():
            return True
        ticket = request.args.get("ticket")
        if ticket:
            return self._validate_ticket(ticket)
        return False

    def force_authentication(self) -> bool:
        if self.is_authenticated():
            return True
        abort(redirect(self.get_login_url()))

    def check_authentication(self) -> bool:
        """Gateway check: ask CAS once without prompting, then report the result."""
        if self.is_authenticated():
            session.pop(SESSION_GATEWAYED, None)
            return True
        if session.pop(SESSION_GATEWAYED, False):
            return False
        session[SESSION_GATEWAYED] = True
        abort(redirect(self.get_login_url(gateway="true")))

    def get_user(self) -> str | None:
        return session.get(SESSION_USER)

    def get_attributes(self) -> Dict[str, Any]:
        return dict(session.get(SESSION_ATTRIBUTES) or {})

    def get_attribute(self, key: str) -> Any:
        return self.get_attributes().get(key)

    def has_attribute(self, key: str) -> bool:
        return key in self.get_attributes()

    def logout(self, params: Mapping[str, str]) -> None:
        url = self.get_logout_url(params)
        session.clear()
        self.log(f"Redirecting to CAS logout {url}")
        abort(redirect(url))

    def store_pgt(self, pgt_iou: str, pgt_id: str) -> None:
        pgt_cache.set(pgt_iou, pgt_id)

    def retrieve_pt(self) -> str:
        if self.role is not ClientRole.PROXY:
            raise RuntimeError("CAS client is not configured as a proxy")
        pgt = pgt_cache.get(session.get(SESSION_PGT_IOU, ""))
        if not pgt:
            raise RuntimeError("No proxy granting ticket for this session")
        return self.cas_client().get_proxy_ticket(pgt)

    # ---- SAML single logout ----

    def is_logout_request_allowed(self, remote_addr: str) -> bool:
        if self.check_logout_client is None:
            return False
        if not self.check_logout_client:
            return True
        if remote_addr in self.real_hosts:
            return True
        try:
            hostname = socket.gethostbyaddr(remote_addr)[0]
        except OSError:
            self.log(f"Could not resolve logout request sender {remote_addr}")
            return False
        return hostname in self.real_hosts

    def process_logout_request(self, logout_request: str) -> List[str]:
        """Revoke the service tickets named in a SAML logout request."""
        slos = self.cas_client().get_saml_slos(logout_request) or []
        tickets = [slo.text for slo in slos if slo.text]
        for ticket in tickets:
            revoked_tickets.set(ticket, True)
            self.log(f"Service ticket {ticket} revoked by single logout")
        return tickets

    def log(self, message: str) -> None:
        if self.logger is not None:
            self.logger.debug(message)
