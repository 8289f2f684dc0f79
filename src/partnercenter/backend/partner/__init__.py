# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import enum

from dataclasses import dataclass


@dataclass(frozen=True)
class PartnerEndpoints:
    partner_center: str
    azure: str
    login: str
    partner_center_audience: str = 'https://api.partnercenter.microsoft.com'


class PartnerEnvironment(enum.Enum):
    GlobalCloud = PartnerEndpoints(
        partner_center='https://api.partnercenter.microsoft.com',
        azure='https://management.azure.com',
        login='https://login.microsoftonline.com',
    )
    ChinaCloud = PartnerEndpoints(
        partner_center='https://partner.partnercenterapi.microsoftonline.cn',
        azure='https://management.chinacloudapi.cn',
        login='https://login.chinacloudapi.cn',
    )
    GermanCloud = PartnerEndpoints(
        partner_center='https://api.partnercentral.de',
        azure='https://management.microsoftazure.de',
        login='https://login.microsoftonline.de',
    )
    USGovernment = PartnerEndpoints(
        partner_center='https://partner.partnercenterapi.usgovcloudapi.net',
        azure='https://management.usgovcloudapi.net',
        login='https://login.microsoftonline.us',
    )

    @property
    def partner_center_endpoint(self) -> str:
        return self.value.partner_center

    @property
    def azure_endpoint(self) -> str:
        return self.value.azure

    @property
    def login_endpoint(self) -> str:
        return self.value.login

    @property
    def partner_center_scope(self) -> str:
        return f'{self.value.partner_center_audience}/user_impersonation'
