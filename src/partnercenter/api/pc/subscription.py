# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from marshmallow import fields, post_load

from ..base import SchemaNonempty
from ..meta import TypeMeta, v1_TypeMetaSchema
from ..registry import registry as _registry


@dataclass
class ModernCspSubscriptionCreationParameters:
    display_name: str
    sku_id: str
    reseller_id: str | None = None


class ModernCspSubscriptionCreationParametersSchema(SchemaNonempty):
    """ Request body of the createSubscription operation """
    display_name = fields.String(data_key='displayName', required=True)
    sku_id = fields.String(data_key='skuId', required=True)
    reseller_id = fields.String(data_key='resellerId', allow_none=True)


@dataclass
class SubscriptionCreationResult:
    subscription_link: str | None = None


@_registry.register
class v1_SubscriptionCreationResultSchema(v1_TypeMetaSchema):
    __model__ = SubscriptionCreationResult
    __typemeta__ = TypeMeta('SubscriptionCreationResult', 'partnercenter.microsoft.com/v1')

    subscription_link = fields.String(data_key='subscriptionLink', allow_none=True)

    @post_load
    def make_object(self, data: dict, **kw) -> SubscriptionCreationResult:
        data.pop('api_version', None)
        data.pop('kind', None)
        return SubscriptionCreationResult(**data)
