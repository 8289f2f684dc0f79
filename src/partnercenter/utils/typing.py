# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

from collections.abc import Callable
from typing import Any

# Recursive JSON alias needs the Python 3.12 type statement
JSONObject = dict[str, Any]

# Sink for user-visible text, used by notice renderers and output writers
WriteFn = Callable[[str], None]
