# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import dataclasses
import logging

from dataclasses import dataclass
from marshmallow import EXCLUDE
from typing import TYPE_CHECKING

from partnercenter.api.pc.agreement import AgreementDocument, v1_AgreementDocumentSchema
from partnercenter.utils.cancellation import CancellationToken

from .base import PartnerBase, PartnerBaseClient

if TYPE_CHECKING:
    from .operations import PartnerOperations


logger = logging.getLogger(__name__)


@dataclass
class AgreementTemplateCollection(PartnerBaseClient['PartnerOperations']):
    def by_id(self, template_id: str) -> AgreementTemplate:
        return AgreementTemplate(self.parent, template_id)


@dataclass
class AgreementTemplate(PartnerBase['PartnerOperations']):
    template_id: str

    @property
    def path(self) -> str:
        return f'/v1/agreements/{self.template_id}'

    @property
    def document(self) -> AgreementDocumentOperations:
        return AgreementDocumentOperations(self)


@dataclass
class AgreementDocumentOperations(PartnerBase[AgreementTemplate]):
    """
    Retrieves the document of one agreement template.

    Narrowing returns a new operation, the original is left untouched.
    """

    country: str | None = None
    language: str | None = None

    @property
    def path(self) -> str:
        return f'{self.parent.path}/document'

    def by_country(self, country: str) -> AgreementDocumentOperations:
        return dataclasses.replace(self, country=country)

    def by_language(self, language: str) -> AgreementDocumentOperations:
        return dataclasses.replace(self, language=language)

    def params(self) -> dict[str, str]:
        ret = super().params()
        if self.country:
            ret['country'] = self.country
        if self.language:
            ret['language'] = self.language
        return ret

    async def get(self, token: CancellationToken | None = None) -> AgreementDocument:
        logger.debug('Retrieving agreement document for template %s', self.parent.template_id)
        data = await self._request_data(method='GET', token=token)
        return v1_AgreementDocumentSchema().load(data, unknown=EXCLUDE)
