# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import httpx

from dataclasses import dataclass
from typing import Self

from .agreement import AgreementTemplateCollection
from .client import PartnerClient


@dataclass
class PartnerOperations:
    """ Entry point to the Partner Center API for one invocation """
    partner_client: PartnerClient

    @property
    def client(self) -> httpx.AsyncClient:
        return self.partner_client

    @property
    def agreement_templates(self) -> AgreementTemplateCollection:
        return AgreementTemplateCollection(self)

    async def aclose(self) -> None:
        await self.partner_client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
