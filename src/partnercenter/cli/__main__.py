# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

from .base import cli

# Import to register all the commands
from . import (  # noqa: F401
    configdump,
    get_agreement_document,
    new_azure_subscription,
)


def main() -> None:
    cli.main()


if __name__ == '__main__':
    main()
