# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import logging
import re

from marshmallow import Schema, fields, validate

from partnercenter.api.pc.subscription import ModernCspSubscriptionCreationParameters
from partnercenter.backend.partner.subscription import SubscriptionClient

from .base import cli, BaseCommand


logger = logging.getLogger(__name__)


CUSTOMER_ID_PATTERN = re.compile(
    r'^(\{){0,1}[0-9a-f]{8}\-[0-9a-f]{4}\-[0-9a-f]{4}\-[0-9a-f]{4}\-[0-9a-f]{12}(\}){0,1}$',
    re.IGNORECASE,
)

# SKU of Azure plan subscriptions sold through CSP
AZURE_PLAN_SKU_ID = '0001'


class NewPartnerAzureSubscriptionParameters(Schema):
    billing_account_name = fields.String(required=True)
    customer_id = fields.String(
        required=True,
        validate=validate.Regexp(CUSTOMER_ID_PATTERN, error='Customer ID must be a GUID.'),
    )
    display_name = fields.String(required=True)
    reseller_id = fields.String()


@cli.register(
    verb='New',
    noun='PartnerAzureSubscription',
    help='create an Azure plan subscription for a customer',
    epilog='''
config options:
  auth.tenant           tenant of the partner
  auth.client           application ID of service account, or empty for using az
  auth.secret           secret of service account, or empty for using az
  environment           Partner Center environment (default: GlobalCloud)
''',
    arguments=[
        cli.prepare_argument(
            '--billing-account-name',
            help='name of the billing account',
            metavar='NAME',
            required=True,
        ),
        cli.prepare_argument(
            '--customer-id',
            help='identifier of the customer',
            metavar='GUID',
            required=True,
        ),
        cli.prepare_argument(
            '--display-name',
            help='display name of the subscription',
            metavar='NAME',
            required=True,
        ),
        cli.prepare_argument(
            '--reseller-id',
            help='identifier of the indirect reseller',
            metavar='ID',
        ),
    ],
)
class NewPartnerAzureSubscriptionCommand(BaseCommand):
    parameters_schema = NewPartnerAzureSubscriptionParameters

    billing_account_name: str
    customer_id: str
    display_name: str
    reseller_id: str | None

    def __init__(
            self, *,
            billing_account_name: str,
            customer_id: str,
            display_name: str,
            reseller_id: str | None = None,
            **kw,
    ) -> None:
        super().__init__(**kw)

        params = self.bind_parameters(
            billing_account_name=billing_account_name,
            customer_id=customer_id,
            display_name=display_name,
            reseller_id=reseller_id,
        )
        self.billing_account_name = params['billing_account_name']
        self.customer_id = params['customer_id']
        self.display_name = params['display_name']
        self.reseller_id = params.get('reseller_id')

    async def execute(self) -> None:
        environment = self.session.environment
        client = self.session.client_factory.create_service_client(
            SubscriptionClient,
            [f'{environment.azure_endpoint}/user_impersonation'],
        )

        async with client:
            parameters = ModernCspSubscriptionCreationParameters(
                display_name=self.display_name,
                reseller_id=self.reseller_id,
                sku_id=AZURE_PLAN_SKU_ID,
            )

            self.write_object(await client.subscription_factory.create_csp_subscription(
                self.billing_account_name,
                self.customer_id,
                parameters,
                self.cancellation_token,
            ))


if __name__ == '__main__':
    cli.main(NewPartnerAzureSubscriptionCommand)
