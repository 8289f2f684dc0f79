# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import logging

from dataclasses import (
    dataclass,
    field,
)

from .backend.partner import PartnerEnvironment
from .backend.partner.client import PartnerAuth, PartnerAuthServiceAccount
from .backend.partner.factory import ClientFactory
from .utils.tracing import DebugMessages, TracingDispatcher


logger = logging.getLogger(__name__)


@dataclass
class PartnerSession:
    """
    Context shared by the commands of one process.

    Holds the environment, the queue of pending debug messages, the tracing
    attachment point and the factory for authenticated clients.  Commands get
    the session passed in explicitly.
    """

    environment: PartnerEnvironment = PartnerEnvironment.GlobalCloud
    auth: PartnerAuth = field(default_factory=PartnerAuth)
    debug_messages: DebugMessages = field(default_factory=DebugMessages)
    tracing: TracingDispatcher = field(default_factory=TracingDispatcher)
    client_factory: ClientFactory = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.client_factory is None:
            self.client_factory = ClientFactory(self.environment, self.auth, self.tracing)

    @classmethod
    def from_credentials(
            cls, *,
            environment: PartnerEnvironment = PartnerEnvironment.GlobalCloud,
            tenant: str | None = None,
            client_id: str | None = None,
            client_secret: str | None = None,
    ) -> PartnerSession:
        auth: PartnerAuth
        if client_id and client_secret:
            if not tenant:
                raise ValueError('Service account authentication requires a tenant')
            logger.debug('Using service account %s in tenant %s', client_id, tenant)
            auth = PartnerAuthServiceAccount(
                tenant=tenant,
                login_endpoint=environment.login_endpoint,
                client_id=client_id,
                client_secret=client_secret,
            )
        else:
            auth = PartnerAuth(tenant=tenant)
        return cls(environment=environment, auth=auth)
