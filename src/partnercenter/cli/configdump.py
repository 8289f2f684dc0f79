# SPDX-License-Identifier: GPL-2.0-or-later

from .base import cli_internal, BaseCommand


@cli_internal.register(
    'config-dump',
    help='show merged configuration',
)
class ConfigdumpCommand(BaseCommand):
    async def execute(self) -> None:
        self.flush_debug_messages()
        self._config.dump()


if __name__ == '__main__':
    cli_internal.main(ConfigdumpCommand)
