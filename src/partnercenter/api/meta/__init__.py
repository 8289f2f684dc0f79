# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import typing

from collections import namedtuple
from marshmallow import fields, post_dump, post_load, ValidationError, validates
from uuid import UUID, uuid4

from ..base import SchemaNonempty


TypeMeta = namedtuple('TypeMeta', ['kind', 'api_version'])


class v1_TypeMetaSchema(SchemaNonempty):
    __model__: typing.ClassVar[typing.Type] = TypeMeta
    __typemeta__: typing.ClassVar[typing.Optional[TypeMeta]] = None

    api_version = fields.String(data_key='apiVersion')
    kind = fields.String()

    @post_dump
    def dump_typemeta(self, data: dict, **kw) -> dict:
        if self.__typemeta__:
            data['apiVersion'] = self.__typemeta__.api_version
            data['kind'] = self.__typemeta__.kind
        return data

    @validates('api_version')
    def validate_api_version(self, data: str, **kw) -> None:
        if self.__typemeta__ and self.__typemeta__.api_version != data:
            raise ValidationError('Input is of wrong api version')

    @validates('kind')
    def validate_kind(self, data: str, **kw) -> None:
        if self.__typemeta__ and self.__typemeta__.kind != data:
            raise ValidationError('Input is of wrong kind')


class ObjectMeta:
    name: str | None
    annotations: dict[str, str]
    labels: dict[str, str]
    uid: UUID

    def __init__(
            self,
            name=None,
            annotations=None,
            labels=None,
            uid=None,
    ) -> None:
        self.name = name
        self.annotations = annotations or {}
        self.labels = labels or {}
        self.uid = uid or uuid4()


class v1_ObjectMetaSchema(SchemaNonempty):
    annotations = fields.Dict(keys=fields.String(), values=fields.String())
    name = fields.String()
    labels = fields.Dict(keys=fields.String(), values=fields.String())
    uid = fields.UUID()

    @post_load
    def make_object(self, data, **kw):
        return ObjectMeta(**data)
