import pytest


def test_masquerade_user_name_enables_masquerading(cas_proxy, make_manager):
    manager = make_manager({"cas_masquerade": "jdoe"})

    assert manager.is_masquerading() is True
    assert manager.user() == "jdoe"
    assert manager.authenticate() is True
    assert manager.is_authenticated() is True
    assert manager.check_authentication() is True
    cas_proxy.force_authentication.assert_not_called()
    cas_proxy.is_authenticated.assert_not_called()
    cas_proxy.get_user.assert_not_called()


def test_masquerade_attributes(cas_proxy, make_manager):
    manager = make_manager({"cas_masquerade": True})
    manager.set_attributes({"email": "jdoe@example.edu"})

    assert manager.get_attributes() == {"email": "jdoe@example.edu"}
    assert manager.get_attribute("email") == "jdoe@example.edu"
    assert manager.get_attribute("missing") is None
    assert manager.has_attribute("email")
    assert not manager.has_attribute("missing")
    cas_proxy.get_attributes.assert_not_called()


def test_delegates_to_cas_when_not_masquerading(cas_proxy, make_manager):
    cas_proxy.force_authentication.return_value = True
    cas_proxy.get_user.return_value = "alice"
    cas_proxy.get_attributes.return_value = {"uid": "alice"}
    cas_proxy.get_attribute.return_value = "alice"
    cas_proxy.has_attribute.return_value = True
    manager = make_manager()

    assert manager.authenticate() is True
    assert manager.get_current_user() == "alice"
    assert manager.get_attributes() == {"uid": "alice"}
    assert manager.get_attribute("uid") == "alice"
    assert manager.has_attribute("uid")
    cas_proxy.get_attribute.assert_called_once_with("uid")


@pytest.mark.parametrize(
    "config, url, service, expected",
    [
        ({}, "", "", {}),
        ({}, "https://app.example.edu/bye", "", {"url": "https://app.example.edu/bye"}),
        ({"cas_logout_redirect": "https://app.example.edu/"}, "", "", {"service": "https://app.example.edu/"}),
        (
            {"cas_logout_redirect": "https://app.example.edu/"},
            "",
            "https://other.example.edu/",
            {"service": "https://other.example.edu/"},
        ),
    ],
    ids=["no params", "url", "configured redirect", "explicit service wins"],
)
def test_logout_params(cas_proxy, make_manager, config, url, service, expected):
    cas_proxy.is_session_authenticated.return_value = False
    manager = make_manager(config)

    manager.logout(url, service)

    cas_proxy.logout.assert_called_once_with(expected)
    cas_proxy.log.assert_not_called()


def test_logout_logs_authenticated_user(cas_proxy, make_manager):
    cas_proxy.is_session_authenticated.return_value = True
    cas_proxy.get_user.return_value = "alice"
    manager = make_manager()

    manager.logout_with_url("https://app.example.edu/bye")

    cas_proxy.log.assert_called_once_with("Logout requested for user: alice")
    cas_proxy.logout.assert_called_once_with({"url": "https://app.example.edu/bye"})


def test_retrieve_proxy_ticket(cas_proxy, make_manager):
    cas_proxy.retrieve_pt.return_value = "PT-1-abc"

    assert make_manager({"cas_proxy": True}).retrieve_proxy_ticket() == "PT-1-abc"
