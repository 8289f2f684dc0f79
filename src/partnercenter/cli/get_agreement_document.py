# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import logging

from marshmallow import Schema, fields, validate

from .base import cli, BaseCommand


logger = logging.getLogger(__name__)


class GetPartnerAgreementDocumentParameters(Schema):
    country = fields.String(validate=validate.Length(min=1))
    language = fields.String(validate=validate.Length(min=1))
    template_id = fields.String(required=True, validate=validate.Length(min=1))


@cli.register(
    verb='Get',
    noun='PartnerAgreementDocument',
    help='retrieve the document of a Partner Center agreement template',
    epilog='''
config options:
  auth.tenant           tenant of the partner
  auth.client           application ID of service account, or empty for using az
  auth.secret           secret of service account, or empty for using az
  environment           Partner Center environment (default: GlobalCloud)
''',
    arguments=[
        cli.prepare_argument(
            '--country',
            help='country of the agreement document',
            metavar='COUNTRY',
        ),
        cli.prepare_argument(
            '--language',
            help='language and locale of the agreement document',
            metavar='LANGUAGE',
        ),
        cli.prepare_argument(
            '--template-id',
            help='unique identifier of the agreement type',
            metavar='ID',
            required=True,
        ),
    ],
)
class GetPartnerAgreementDocumentCommand(BaseCommand):
    parameters_schema = GetPartnerAgreementDocumentParameters

    country: str | None
    language: str | None
    template_id: str

    def __init__(
            self, *,
            template_id: str,
            country: str | None = None,
            language: str | None = None,
            **kw,
    ) -> None:
        super().__init__(**kw)

        params = self.bind_parameters(
            country=country,
            language=language,
            template_id=template_id,
        )
        self.country = params.get('country')
        self.language = params.get('language')
        self.template_id = params['template_id']

    async def execute(self) -> None:
        factory = self.session.client_factory
        async with factory.create_partner_operations(self.correlation_id) as partner:
            operation = partner.agreement_templates.by_id(self.template_id).document

            if self.country:
                operation = operation.by_country(self.country)

            if self.language:
                operation = operation.by_language(self.language)

            self.write_object(await operation.get(self.cancellation_token))


if __name__ == '__main__':
    cli.main(GetPartnerAgreementDocumentCommand)
