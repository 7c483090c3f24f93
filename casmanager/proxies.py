"""Capability sets the CAS manager drives. Concrete adapters live in
``casmanager.cas.client`` (CAS client) and ``casmanager.session`` (Flask)."""
from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, Mapping, Protocol, Sequence


class CasProxy(Protocol):
    # configuration
    def set_logger(self, logger: logging.Logger) -> None: ...
    def set_verbose(self, verbose: bool) -> None: ...
    def server_type_cas(self, version: str) -> Hashable: ...
    def server_type_saml(self) -> Hashable: ...
    def client(self, server_type: Hashable, hostname: str, port: int, uri: str,
               service: str, control_session: bool) -> None: ...
    def proxy(self, server_type: Hashable, hostname: str, port: int, uri: str,
              service: str, control_session: bool) -> None: ...
    def handle_logout_requests(self, check_client: bool, allowed_clients: Sequence[str]) -> None: ...
    def set_no_cas_server_validation(self) -> None: ...
    def set_cas_server_ca_cert(self, path: str, validate_cn: bool) -> None: ...
    def set_server_login_url(self, url: str) -> None: ...
    def set_server_logout_url(self, url: str) -> None: ...
    def set_fixed_service_url(self, url: str) -> None: ...

    # request time
    def force_authentication(self) -> bool: ...
    def check_authentication(self) -> bool: ...
    def is_authenticated(self) -> bool: ...
    def is_session_authenticated(self) -> bool: ...
    def get_user(self) -> str | None: ...
    def get_attributes(self) -> Dict[str, Any]: ...
    def get_attribute(self, key: str) -> Any: ...
    def has_attribute(self, key: str) -> bool: ...
    def logout(self, params: Mapping[str, str]) -> None: ...
    def retrieve_pt(self) -> str: ...
    def log(self, message: str) -> None: ...


class SessionProxy(Protocol):
    def headers_sent(self) -> bool: ...
    def session_get_id(self) -> str: ...
    def session_set_name(self, name: str) -> None: ...
    def session_set_cookie_params(self, lifetime: int, path: str, domain: str,
                                  secure: bool, httponly: bool) -> None: ...
