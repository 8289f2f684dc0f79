# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import datetime

from dataclasses import dataclass
from marshmallow import fields, post_load

from ..meta import TypeMeta, v1_TypeMetaSchema
from ..registry import registry as _registry


@dataclass
class AgreementDocument:
    template_id: str
    agreement_type: str | None = None
    country: str | None = None
    language: str | None = None
    version_date: datetime.datetime | None = None
    view_url: str | None = None
    download_url: str | None = None


@_registry.register
class v1_AgreementDocumentSchema(v1_TypeMetaSchema):
    __model__ = AgreementDocument
    __typemeta__ = TypeMeta('AgreementDocument', 'partnercenter.microsoft.com/v1')

    template_id = fields.String(data_key='templateId', required=True)
    agreement_type = fields.String(data_key='agreementType', allow_none=True)
    country = fields.String(allow_none=True)
    language = fields.String(allow_none=True)
    version_date = fields.DateTime(data_key='versionDate', allow_none=True)
    view_url = fields.String(data_key='viewUrl', allow_none=True)
    download_url = fields.String(data_key='downloadUrl', allow_none=True)

    @post_load
    def make_object(self, data: dict, **kw) -> AgreementDocument:
        data.pop('api_version', None)
        data.pop('kind', None)
        return AgreementDocument(**data)
