import pytest

from casmanager.config import Settings
from casmanager.options import CasOptions, ClientRole, ConfigError, ValidationMode, parse_real_hosts


def test_defaults():
    options = CasOptions.from_mapping({})

    assert options.cas_verbose_errors is False
    assert options.cas_enable_saml is False
    assert options.cas_masquerade is False
    assert options.cas_validation is ValidationMode.NONE
    assert options.cas_redirect_path is None
    assert options.cas_port == 443
    assert options.cas_session_name == "CASAuth"
    assert options.role is ClientRole.CLIENT


def test_rejects_unknown_keys():
    with pytest.raises(ConfigError, match="cas_hostnme"):
        CasOptions.from_mapping({"cas_hostnme": "cas.example.edu"})


@pytest.mark.parametrize("value, expected", [("true", True), ("1", True), ("Yes", True),
                                             ("false", False), ("0", False), ("", False)])
def test_coerces_env_booleans(value, expected):
    assert CasOptions.from_mapping({"cas_proxy": value}).cas_proxy is expected


def test_rejects_bad_boolean():
    with pytest.raises(ConfigError):
        CasOptions.from_mapping({"cas_enable_saml": "maybe"})


def test_coerces_port():
    assert CasOptions.from_mapping({"cas_port": "8443"}).cas_port == 8443
    with pytest.raises(ConfigError):
        CasOptions.from_mapping({"cas_port": "https"})


@pytest.mark.parametrize("value, expected", [
    (None, ValidationMode.NONE),
    ("", ValidationMode.NONE),
    ("ca", ValidationMode.CA),
    ("SELF", ValidationMode.SELF),
])
def test_validation_mode(value, expected):
    options = CasOptions.from_mapping({"cas_validation": value})
    assert options.cas_validation is expected
    assert options.validates_server is (expected is not ValidationMode.NONE)


def test_parse_real_hosts():
    assert parse_real_hosts("a.example.com,b.example.com") == ("a.example.com", "b.example.com")
    assert parse_real_hosts(" a.example.com , ,a.example.com") == ("a.example.com", "a.example.com")
    assert parse_real_hosts("") == ()
    assert parse_real_hosts(None) == ()


def test_masquerade_string_names_user():
    options = CasOptions.from_mapping({"cas_masquerade": "jdoe"})

    assert options.cas_masquerade is True
    assert options.masquerade_user == "jdoe"


def test_masquerade_boolean_string():
    options = CasOptions.from_mapping({"cas_masquerade": "false"})

    assert options.cas_masquerade is False
    assert options.masquerade_user is None


def test_blank_urls_are_absent():
    options = CasOptions.from_mapping({"cas_redirect_path": "  ", "cas_login_url": ""})

    assert options.cas_redirect_path is None
    assert options.cas_login_url is None


def test_settings_reads_cas_environment(monkeypatch):
    monkeypatch.setenv("CAS_HOSTNAME", " 'cas.example.edu' ")
    monkeypatch.setenv("CAS_PORT", "8443")
    monkeypatch.setenv("CAS_ENABLE_SAML", "true")
    monkeypatch.setenv("CAS_REAL_HOSTS", "cas1.example.edu,cas2.example.edu")
    monkeypatch.setenv("CAS_CLIENT_SERVICE", "https://app.example.edu")
    monkeypatch.delenv("CAS_VALIDATION", raising=False)

    options = CasOptions.from_mapping(Settings().cas_config())

    assert options.cas_hostname == "cas.example.edu"
    assert options.cas_port == 8443
    assert options.cas_enable_saml is True
    assert options.cas_real_hosts == ("cas1.example.edu", "cas2.example.edu")
    assert options.cas_client_service == "https://app.example.edu"
    assert options.cas_validation is ValidationMode.NONE
