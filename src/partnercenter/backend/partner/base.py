# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import httpx
import logging
import uuid

from dataclasses import dataclass
from typing import (
    Any,
    ClassVar,
    Generic,
    TypeVar,
)

from partnercenter.utils.cancellation import CancellationToken
from partnercenter.utils.typing import JSONObject


Parent = TypeVar('Parent', bound='PartnerBaseClient')


logger = logging.getLogger(__name__)


@dataclass
class PartnerBaseClient(Generic[Parent]):
    parent: Parent

    @property
    def client(self) -> httpx.AsyncClient:
        return self.parent.client


@dataclass
class PartnerBase(PartnerBaseClient[Parent]):
    api_version: ClassVar[str | None] = None

    @property
    def path(self) -> str:
        raise NotImplementedError

    def url(self, subresource: str | None = None) -> str:
        path = self.path
        if subresource:
            path = f'{path}/{subresource}'
        return path

    def params(self) -> dict[str, Any]:
        if self.api_version:
            return {'api-version': self.api_version}
        return {}

    async def _request(
        self, *,
        method: str,
        url: str | None = None,
        params: dict[str, Any] | None = None,
        data: JSONObject | None = None,
        token: CancellationToken | None = None,
    ) -> httpx.Response:
        if token is not None:
            token.raise_if_cancellation_requested()
        resp = await self.client.request(
            method,
            url or self.url(),
            json=data,
            params=self.params() if params is None else params,
            headers={'MS-RequestId': str(uuid.uuid4())},
        )
        resp.raise_for_status()
        return resp

    @staticmethod
    def _response_data(resp: httpx.Response) -> JSONObject:
        if not resp.headers.get('content-type', '').startswith('application/json'):
            raise RuntimeError(f'Unexpected content type in response from {resp.request.url}')
        return resp.json()

    async def _request_data(self, **kw) -> JSONObject:
        return self._response_data(await self._request(**kw))
