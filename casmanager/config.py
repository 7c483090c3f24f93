import os
from dotenv import load_dotenv

load_dotenv()

def _clean(v: str | None, default: str = "") -> str:
    if v is None:
        return default
    s = v.strip()
    if (s.startswith('"') and s.endswith('"')) or (s.startswith("'") and s.endswith("'")):
        s = s[1:-1].strip()
    return s

def _env(name: str) -> str | None:
    """Cleaned env value, or None when unset/blank so CasOptions defaults apply."""
    v = _clean(os.getenv(name))
    return v or None

# Every CasOptions key can be set from the environment as its upper-case name,
# e.g. CAS_HOSTNAME -> cas_hostname.
CAS_ENV_KEYS = (
    "cas_hostname",
    "cas_port",
    "cas_uri",
    "cas_client_service",
    "cas_control_session",
    "cas_proxy",
    "cas_version",
    "cas_enable_saml",
    "cas_real_hosts",
    "cas_validation",
    "cas_cert",
    "cas_validate_cn",
    "cas_login_url",
    "cas_logout_url",
    "cas_logout_redirect",
    "cas_redirect_path",
    "cas_masquerade",
    "cas_verbose_errors",
    "cas_debug",
    "cas_session_name",
    "cas_session_lifetime",
    "cas_session_path",
    "cas_session_domain",
    "cas_session_secure",
    "cas_session_httponly",
)

class Settings:
    PORT = int(_clean(os.getenv("PORT", "3000")))
    SESSION_SECRET = _clean(os.getenv("SESSION_SECRET", "change-me-in-prod"))
    BASE_URL = _clean(os.getenv("BASE_URL", f"http://localhost:{PORT}")).rstrip("/")
    TRUST_PROXY = _clean(os.getenv("TRUST_PROXY", "1")) == "1"

    def cas_config(self) -> dict:
        """Flat CAS configuration mapping read from the environment."""
        config = {}
        for key in CAS_ENV_KEYS:
            value = _env(key.upper())
            if value is not None:
                config[key] = value
        # Service base defaults to this app's public URL
        config.setdefault("cas_client_service", self.BASE_URL)
        return config


settings = Settings()
