# SPDX-License-Identifier: GPL-2.0-or-later

import logging
import pytest


@pytest.fixture(autouse=True)
def isolate_config(mock_env_xdg):
    pass


@pytest.fixture
def debug_log(caplog):
    caplog.set_level(logging.DEBUG)
    return caplog
