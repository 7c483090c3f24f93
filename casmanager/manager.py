from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from flask import current_app

from .cas.client import CasClientProxy
from .options import CasOptions, ClientRole
from .proxies import CasProxy, SessionProxy
from .session import FlaskSessionProxy


class SessionBootstrapper:
    """Name and scope the session cookie before anything is sent."""

    def __init__(self, options: CasOptions, session_proxy: SessionProxy) -> None:
        self.options = options
        self.session_proxy = session_proxy

    def run(self) -> None:
        if self.session_proxy.headers_sent():
            return
        # An active session keeps its name and cookie params
        if self.session_proxy.session_get_id() != "":
            return
        o = self.options
        self.session_proxy.session_set_name(o.cas_session_name)
        self.session_proxy.session_set_cookie_params(
            o.cas_session_lifetime,
            o.cas_session_path,
            o.cas_session_domain,
            o.cas_session_secure,
            o.cas_session_httponly,
        )


class CasManager:
    """
    Configure a CAS client from a flat option mapping.

    All configuration happens in the constructor, in a fixed order; errors from
    either proxy propagate unchanged. Afterwards the manager is the
    masquerade-aware entry point for authentication checks.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | CasOptions,
        logger: logging.Logger | None = None,
        cas_proxy: CasProxy | None = None,
        session_proxy: SessionProxy | None = None,
    ) -> None:
        self.options = config if isinstance(config, CasOptions) else CasOptions.from_mapping(config)
        self.cas_proxy = cas_proxy if cas_proxy is not None else CasClientProxy()
        # The default session proxy needs an application context
        self.session_proxy = session_proxy if session_proxy is not None else FlaskSessionProxy(current_app)
        self._attributes: Dict[str, Any] = {}

        if logger is not None:
            self.cas_proxy.set_logger(logger)
        self.cas_proxy.set_verbose(self.options.cas_verbose_errors)

        SessionBootstrapper(self.options, self.session_proxy).run()

        self._configure_cas()
        self._configure_cas_validation()

        o = self.options
        if o.cas_login_url:
            self.cas_proxy.set_server_login_url(o.cas_login_url)
        if o.cas_logout_url:
            self.cas_proxy.set_server_logout_url(o.cas_logout_url)
        # Overrides the URL users return to after login
        if o.cas_redirect_path is not None:
            self.cas_proxy.set_fixed_service_url(o.cas_redirect_path)

        self._masquerading = bool(o.cas_masquerade)

    def _configure_cas(self) -> None:
        o = self.options
        if o.cas_enable_saml:
            server_type = self.cas_proxy.server_type_saml()
        else:
            server_type = self.cas_proxy.server_type_cas(o.cas_version)

        args = (server_type, o.cas_hostname, o.cas_port, o.cas_uri,
                o.cas_client_service, o.cas_control_session)
        if o.role is ClientRole.PROXY:
            self.cas_proxy.proxy(*args)
        else:
            self.cas_proxy.client(*args)

        if o.cas_enable_saml:
            # Only the CAS hosts may send SAML logout requests
            self.cas_proxy.handle_logout_requests(True, list(o.cas_real_hosts))

    def _configure_cas_validation(self) -> None:
        # "ca" and "self" are handled identically
        if self.options.validates_server:
            self.cas_proxy.set_cas_server_ca_cert(self.options.cas_cert, self.options.cas_validate_cn)
        else:
            self.cas_proxy.set_no_cas_server_validation()

    def is_masquerading(self) -> bool:
        return self._masquerading

    def authenticate(self) -> bool:
        if self.is_masquerading():
            return True
        return self.cas_proxy.force_authentication()

    def check_authentication(self) -> bool:
        if self.is_masquerading():
            return True
        return self.cas_proxy.check_authentication()

    def is_authenticated(self) -> bool:
        if self.is_masquerading():
            return True
        return self.cas_proxy.is_authenticated()

    def get_current_user(self) -> str | None:
        if self.is_masquerading():
            return self.options.masquerade_user
        return self.cas_proxy.get_user()

    def user(self) -> str | None:
        return self.get_current_user()

    def get_attributes(self) -> Dict[str, Any]:
        if self.is_masquerading():
            return dict(self._attributes)
        return self.cas_proxy.get_attributes()

    def get_attribute(self, key: str) -> Any:
        if self.is_masquerading():
            return self._attributes.get(key)
        return self.cas_proxy.get_attribute(key)

    def has_attribute(self, key: str) -> bool:
        if self.is_masquerading():
            return key in self._attributes
        return self.cas_proxy.has_attribute(key)

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        """Attributes served while masquerading."""
        self._attributes = dict(attributes)

    def logout(self, url: str = "", service: str = "") -> None:
        if self.cas_proxy.is_session_authenticated():
            self.cas_proxy.log(f"Logout requested for user: {self.cas_proxy.get_user()}")

        params: Dict[str, str] = {}
        if service:
            params["service"] = service
        elif self.options.cas_logout_redirect:
            params["service"] = self.options.cas_logout_redirect
        if url:
            params["url"] = url
        self.cas_proxy.logout(params)

    def logout_with_url(self, url: str) -> None:
        self.logout(url)

    def retrieve_proxy_ticket(self) -> str:
        return self.cas_proxy.retrieve_pt()
