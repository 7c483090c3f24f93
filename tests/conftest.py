from unittest.mock import MagicMock

import pytest

from casmanager.cas.client import CasClientProxy
from casmanager.manager import CasManager
from casmanager.session import FlaskSessionProxy


@pytest.fixture
def cas_proxy():
    return MagicMock(spec=CasClientProxy)


@pytest.fixture
def session_proxy():
    proxy = MagicMock(spec=FlaskSessionProxy)
    proxy.headers_sent.return_value = False
    proxy.session_get_id.return_value = ""
    return proxy


@pytest.fixture
def make_manager(cas_proxy, session_proxy):
    def _make(config=None, logger=None):
        return CasManager(config or {}, logger, cas_proxy, session_proxy)
    return _make
