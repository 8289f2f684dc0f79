# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import asyncio
import httpx
import json
import logging
import subprocess
import time

from dataclasses import (
    dataclass,
    field,
)
from typing import (
    AsyncGenerator,
    Generator,
)

from . import PartnerEnvironment
from ...utils.tracing import TracingDispatcher


logger = logging.getLogger(__name__)


def _advance(flow: Generator[httpx.Request, httpx.Response], response: httpx.Response | None) -> httpx.Request | None:
    try:
        return flow.send(response)
    except StopIteration:
        return None


@dataclass
class PartnerAuthScope:
    scope: str
    access_token: str = field(init=False, repr=False)
    expires_on: int = field(init=False, default=0)


@dataclass
class PartnerAuth(httpx.Auth):
    """
    Bearer token authentication, one token per scope.

    Scopes are registered per host by the client factory.  Requests to hosts
    without a registered scope are sent unauthenticated.
    """

    tenant: str | None = None
    scopes: dict[str, PartnerAuthScope] = field(init=False, default_factory=dict)

    requires_response_body = True

    def register(self, host: str, scope: str) -> PartnerAuthScope:
        return self.scopes.setdefault(host, PartnerAuthScope(scope))

    def _get(self, request: httpx.Request) -> PartnerAuthScope | None:
        return self.scopes.get(request.url.host)

    def _expiring(self, scope: PartnerAuthScope) -> bool:
        return scope.expires_on <= (time.time() + 60)

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response]:
        scope = self._get(request)
        if scope:
            if self._expiring(scope):
                yield from self.update_token(scope)
            request.headers['Authorization'] = f'Bearer {scope.access_token}'
        yield request

    async def async_auth_flow(self, request: httpx.Request) -> AsyncGenerator[httpx.Request, httpx.Response]:
        scope = self._get(request)
        if scope:
            if self._expiring(scope):
                # Token updates may run the Azure CLI, each step runs in a worker thread
                flow = self.update_token(scope)
                token_request = await asyncio.to_thread(_advance, flow, None)
                while token_request is not None:
                    response = yield token_request
                    await response.aread()
                    token_request = await asyncio.to_thread(_advance, flow, response)
            request.headers['Authorization'] = f'Bearer {scope.access_token}'
        yield request

    def update_token(self, scope: PartnerAuthScope) -> Generator[httpx.Request, httpx.Response]:
        yield from []
        logger.debug('trying to authenticate via azure-cli')
        cmd = [
            'az',
            'account',
            'get-access-token',
            f'--scope={scope.scope}',
            '--output=json',
        ]
        if self.tenant:
            cmd.append(f'--tenant={self.tenant}')
        data = json.loads(subprocess.check_output(cmd))
        scope.access_token = data['accessToken']
        scope.expires_on = int(data['expires_on'])


@dataclass
class PartnerAuthServiceAccount(PartnerAuth):
    login_endpoint: str = PartnerEnvironment.GlobalCloud.login_endpoint
    client_id: str = ''
    client_secret: str = field(default='', repr=False)

    @staticmethod
    def default_scope(scope: str) -> str:
        # Client credentials grants take the .default scope of the resource
        resource = scope.rsplit('/', 1)[0]
        return f'{resource}/.default'

    def update_token(self, scope: PartnerAuthScope) -> Generator[httpx.Request, httpx.Response]:
        logger.debug(f'trying to authenticate via service account {self.client_id}')
        request = httpx.Request('POST', f'{self.login_endpoint}/{self.tenant}/oauth2/v2.0/token', data={
            'grant_type': 'client_credentials',
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'scope': self.default_scope(scope.scope),
        })
        response = yield request
        response.raise_for_status()
        data = response.json()
        scope.access_token = data['access_token']
        scope.expires_on = int(time.time()) + int(data['expires_in'])


class PartnerClient(httpx.AsyncClient):
    """
    Asynchronous HTTP client bound to one service endpoint.

    All requests pass through the tracing dispatcher of the session the
    client was created for.
    """

    def __init__(
            self, *,
            auth: PartnerAuth,
            base_url: str,
            tracing: TracingDispatcher | None = None,
            headers: dict[str, str] | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            auth=auth,
            base_url=base_url,
            headers={'Accept': 'application/json', **(headers or {})},
            event_hooks=tracing.event_hooks() if tracing else None,
            transport=transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self

