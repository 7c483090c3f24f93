from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Mapping, Tuple

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"", "0", "false", "no", "off"}


class ConfigError(ValueError):
    """Raised when a CAS configuration mapping cannot be normalized."""


class ClientRole(Enum):
    CLIENT = "client"
    PROXY = "proxy"


class ValidationMode(Enum):
    NONE = ""
    CA = "ca"
    SELF = "self"


def _bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE:
            return True
        if v in _FALSE:
            return False
    raise ConfigError(f"{key}: expected a boolean, got {value!r}")


def _int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key}: expected an integer, got {value!r}") from None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def parse_real_hosts(value: str | None) -> Tuple[str, ...]:
    """Split a comma-separated host list, keeping order and duplicates."""
    if not value:
        return ()
    return tuple(h.strip() for h in value.split(",") if h.strip())


def _validation(value: Any) -> ValidationMode:
    v = "" if value is None else str(value).strip().lower()
    try:
        return ValidationMode(v)
    except ValueError:
        raise ConfigError(f"cas_validation: expected 'ca', 'self' or empty, got {value!r}") from None


@dataclass(frozen=True)
class CasOptions:
    """
    Normalized CAS configuration.

    Field names match the flat mapping keys (cas_hostname, cas_port, ...).
    Missing keys take the defaults below; ``cas_masquerade`` may be a bool or
    the name of the user to impersonate.
    """

    cas_hostname: str = ""
    cas_port: int = 443
    cas_uri: str = "/cas"
    cas_client_service: str = ""
    cas_control_session: bool = False
    cas_proxy: bool = False
    cas_version: str = "2.0"
    cas_enable_saml: bool = False
    cas_real_hosts: Tuple[str, ...] = ()
    cas_validation: ValidationMode = ValidationMode.NONE
    cas_cert: str = ""
    cas_validate_cn: bool = True
    cas_login_url: str | None = None
    cas_logout_url: str | None = None
    cas_logout_redirect: str | None = None
    cas_redirect_path: str | None = None
    cas_masquerade: bool = False
    cas_verbose_errors: bool = False
    cas_debug: bool = False
    cas_session_name: str = "CASAuth"
    cas_session_lifetime: int = 7200
    cas_session_path: str = "/"
    cas_session_domain: str = ""
    cas_session_secure: bool = False
    cas_session_httponly: bool = True
    masquerade_user: str | None = field(default=None, compare=False)

    @property
    def role(self) -> ClientRole:
        return ClientRole.PROXY if self.cas_proxy else ClientRole.CLIENT

    @property
    def validates_server(self) -> bool:
        return self.cas_validation is not ValidationMode.NONE

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "CasOptions":
        known = {f.name for f in fields(cls)} - {"masquerade_user"}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ConfigError(f"unknown CAS configuration keys: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key, value in config.items():
            if key in ("cas_port", "cas_session_lifetime"):
                values[key] = _int(key, value)
            elif key == "cas_real_hosts":
                values[key] = parse_real_hosts(value) if isinstance(value, str) or value is None else tuple(value)
            elif key == "cas_validation":
                values[key] = _validation(value)
            elif key in ("cas_login_url", "cas_logout_url", "cas_logout_redirect", "cas_redirect_path"):
                values[key] = _optional_str(value)
            elif key == "cas_masquerade":
                # A non-boolean string names the user to masquerade as
                if isinstance(value, str) and value.strip().lower() not in _TRUE | _FALSE:
                    values[key] = True
                    values["masquerade_user"] = value.strip()
                else:
                    values[key] = _bool(key, value) if value is not None else False
            elif isinstance(getattr(cls, key), bool):
                values[key] = _bool(key, value) if value is not None else getattr(cls, key)
            else:
                values[key] = "" if value is None else str(value)
        return cls(**values)
