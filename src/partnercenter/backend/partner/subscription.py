# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import asyncio
import httpx
import logging
import time

from dataclasses import dataclass
from marshmallow import EXCLUDE
from typing import ClassVar

from partnercenter.api.pc.subscription import (
    ModernCspSubscriptionCreationParameters,
    ModernCspSubscriptionCreationParametersSchema,
    SubscriptionCreationResult,
    v1_SubscriptionCreationResultSchema,
)
from partnercenter.utils.cancellation import CancellationToken

from .base import PartnerBase
from .client import PartnerClient


logger = logging.getLogger(__name__)


class SubscriptionClient(PartnerClient):
    @property
    def subscription_factory(self) -> SubscriptionFactory:
        return SubscriptionFactory(self)


@dataclass
class SubscriptionFactory(PartnerBase[SubscriptionClient]):
    api_version: ClassVar[str] = '2018-11-01-preview'

    # Used when a long running operation does not send Retry-After
    poll_interval: ClassVar[int] = 5
    poll_timeout: ClassVar[int] = 1800

    @property
    def client(self) -> httpx.AsyncClient:
        return self.parent

    @staticmethod
    def path_create_csp_subscription(billing_account_name: str, customer_id: str) -> str:
        return (
            f'/providers/Microsoft.Billing/billingAccounts/{billing_account_name}'
            f'/customers/{customer_id}'
            '/providers/Microsoft.Subscription/createSubscription'
        )

    async def create_csp_subscription(
        self,
        billing_account_name: str,
        customer_id: str,
        parameters: ModernCspSubscriptionCreationParameters,
        token: CancellationToken | None = None,
    ) -> SubscriptionCreationResult:
        resp = await self._request(
            method='POST',
            url=self.path_create_csp_subscription(billing_account_name, customer_id),
            data=ModernCspSubscriptionCreationParametersSchema().dump(parameters),
            token=token,
        )
        resp = await self._wait_operation(resp, token)
        return v1_SubscriptionCreationResultSchema().load(self._response_data(resp), unknown=EXCLUDE)

    @classmethod
    def _retry_after(cls, resp: httpx.Response) -> int:
        # HTTP dates fall back to the default interval
        try:
            return int(resp.headers['retry-after'])
        except (KeyError, ValueError):
            return cls.poll_interval

    async def _wait_operation(self, resp: httpx.Response, token: CancellationToken | None) -> httpx.Response:
        start_time = time.monotonic()

        while resp.status_code == httpx.codes.ACCEPTED:
            if time.monotonic() - start_time >= self.poll_timeout:
                raise RuntimeError('Timeout while waiting for subscription creation to finish')

            location = resp.headers.get('location')
            if not location:
                raise RuntimeError('Accepted subscription creation did not return an operation location')
            delay = self._retry_after(resp)
            logger.debug('Subscription creation in progress, polling %s in %d seconds', location, delay)

            await asyncio.sleep(delay)
            # Location already carries the api-version of the operation
            resp = await self._request(method='GET', url=location, params={}, token=token)

        return resp
