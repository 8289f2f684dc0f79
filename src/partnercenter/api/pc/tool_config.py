# SPDX-License-Identifier: GPL-2.0-or-later

import typing

from marshmallow import Schema, fields, post_load, validate

from ..meta import TypeMeta, v1_ObjectMetaSchema, v1_TypeMetaSchema
from ..registry import registry as _registry
from ...backend.partner import PartnerEnvironment


class v1alpha1_ToolConfigAuthSchema(Schema):
    client = fields.UUID()
    secret = fields.String()
    tenant = fields.String()


@_registry.register
class v1alpha1_ToolConfigSchema(v1_TypeMetaSchema):
    __typemeta__ = TypeMeta('ToolConfig', 'partnercenter.microsoft.com/v1alpha1')

    metadata = fields.Nested(v1_ObjectMetaSchema)
    auth = fields.Nested(v1alpha1_ToolConfigAuthSchema)
    environment = fields.String(validate=validate.OneOf(list(PartnerEnvironment.__members__)))

    @post_load
    def load_obj(self, data: dict[str, typing.Any], **kw) -> dict[str, typing.Any]:
        data.pop('api_version', None)
        data.pop('kind', None)
        return data
