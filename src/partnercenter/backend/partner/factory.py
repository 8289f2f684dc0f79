# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import httpx
import logging
import uuid

from typing import TypeVar

from . import PartnerEnvironment
from .client import PartnerAuth, PartnerClient
from .operations import PartnerOperations
from ...utils.tracing import TracingDispatcher


PartnerClientT = TypeVar('PartnerClientT', bound=PartnerClient)


logger = logging.getLogger(__name__)


class ClientFactory:
    """ Creates authenticated clients for the endpoints of one environment """

    def __init__(
            self,
            environment: PartnerEnvironment,
            auth: PartnerAuth,
            tracing: TracingDispatcher | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.environment = environment
        self.auth = auth
        self.tracing = tracing
        self.transport = transport

    def create_partner_operations(self, correlation_id: uuid.UUID) -> PartnerOperations:
        base_url = self.environment.partner_center_endpoint
        self.auth.register(httpx.URL(base_url).host, self.environment.partner_center_scope)
        logger.debug('Creating Partner Center client for %s with correlation id %s', base_url, correlation_id)
        client = PartnerClient(
            auth=self.auth,
            base_url=base_url,
            tracing=self.tracing,
            headers={'MS-CorrelationId': str(correlation_id)},
            transport=self.transport,
        )
        return PartnerOperations(client)

    def create_service_client(self, cls: type[PartnerClientT], scopes: list[str]) -> PartnerClientT:
        if not scopes:
            raise ValueError('At least one scope is required')
        # Scopes look like https://management.azure.com/user_impersonation
        base_url = scopes[0].rsplit('/', 1)[0]
        host = httpx.URL(base_url).host
        self.auth.register(host, scopes[0])
        logger.debug('Creating %s for %s', cls.__name__, base_url)
        return cls(
            auth=self.auth,
            base_url=base_url,
            tracing=self.tracing,
            transport=self.transport,
        )
