# SPDX-License-Identifier: GPL-2.0-or-later

import pytest
import uuid

from partnercenter.backend.partner import PartnerEnvironment
from partnercenter.backend.partner.client import PartnerAuth
from partnercenter.backend.partner.factory import ClientFactory
from partnercenter.backend.partner.subscription import SubscriptionClient


class TestClientFactory:
    def test_create_partner_operations(self):
        auth = PartnerAuth()
        factory = ClientFactory(PartnerEnvironment.ChinaCloud, auth)
        correlation_id = uuid.uuid4()

        operations = factory.create_partner_operations(correlation_id)

        assert str(operations.client.base_url) == 'https://partner.partnercenterapi.microsoftonline.cn/'
        assert operations.client.headers['MS-CorrelationId'] == str(correlation_id)
        assert auth.scopes['partner.partnercenterapi.microsoftonline.cn'].scope == \
            'https://api.partnercenter.microsoft.com/user_impersonation'

    def test_create_service_client(self):
        auth = PartnerAuth()
        factory = ClientFactory(PartnerEnvironment.GlobalCloud, auth)

        client = factory.create_service_client(
            SubscriptionClient,
            ['https://management.azure.com/user_impersonation'],
        )

        assert isinstance(client, SubscriptionClient)
        assert str(client.base_url) == 'https://management.azure.com/'
        assert auth.scopes['management.azure.com'].scope == 'https://management.azure.com/user_impersonation'

    def test_create_service_client_no_scopes(self):
        factory = ClientFactory(PartnerEnvironment.GlobalCloud, PartnerAuth())

        with pytest.raises(ValueError):
            factory.create_service_client(SubscriptionClient, [])


class TestPartnerEnvironment:
    def test_endpoints(self):
        environment = PartnerEnvironment.USGovernment

        assert environment.partner_center_endpoint == 'https://partner.partnercenterapi.usgovcloudapi.net'
        assert environment.azure_endpoint == 'https://management.usgovcloudapi.net'
        assert environment.login_endpoint == 'https://login.microsoftonline.us'
        assert environment.partner_center_scope == 'https://api.partnercenter.microsoft.com/user_impersonation'
