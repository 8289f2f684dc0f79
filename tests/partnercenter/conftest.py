# SPDX-License-Identifier: GPL-2.0-or-later

import httpx
import os
import pytest
import time

from partnercenter.backend.partner import PartnerEnvironment
from partnercenter.backend.partner.client import PartnerAuth
from partnercenter.backend.partner.factory import ClientFactory
from partnercenter.session import PartnerSession
from partnercenter.utils.tracing import TracingDispatcher


class StaticAuth(PartnerAuth):
    def update_token(self, scope):
        yield from []
        scope.access_token = 'token'
        scope.expires_on = int(time.time()) + 3600


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for k in list(os.environ):
        if k.startswith('PARTNERCENTER_') or k.startswith('AZURE_'):
            monkeypatch.delenv(k)


@pytest.fixture
def mock_env_xdg(monkeypatch, tmp_path):
    ret = {}

    def patch(name, path):
        ret[name] = path
        monkeypatch.setenv(f'XDG_{name.upper()}', path.as_posix())
        path.mkdir(parents=True, exist_ok=True)

    patch('config_dirs', tmp_path / 'xdg' / 'dir' / 'config')
    patch('config_home', tmp_path / 'xdg' / 'home' / 'config')
    return ret


@pytest.fixture
def make_session():
    def make(handler, environment=PartnerEnvironment.GlobalCloud):
        auth = StaticAuth()
        tracing = TracingDispatcher()
        factory = ClientFactory(
            environment,
            auth,
            tracing,
            transport=httpx.MockTransport(handler),
        )
        return PartnerSession(
            environment=environment,
            auth=auth,
            tracing=tracing,
            client_factory=factory,
        )
    return make
