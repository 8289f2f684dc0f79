# SPDX-License-Identifier: GPL-2.0-or-later

import argparse
import yaml


class ActionEnum(argparse.Action):
    def __init__(self, enum, help='', **kw):
        self.enum = enum
        choices = (name for name, member in enum.__members__.items())
        help += ' (choices: {})'.format(', '.join(choices))
        super().__init__(help=help, type=self.get_value, **kw)

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, values)

    def get_value(self, name):
        # Member names match case-insensitively
        for member_name, member in self.enum.__members__.items():
            if member_name.lower() == name.lower():
                return member
        raise argparse.ArgumentError(self, 'invalid value: {}'.format(name))


class HashAction(argparse.Action):
    def __init__(
        self,
        *,
        default=None,
        dest=None,
        help='',
        metavar=None,
        **kw,
    ):
        assert default is None
        if metavar is None:
            metavar = f'{dest.upper()}=VALUE'
        super().__init__(
            default={},
            dest=dest,
            help=help,
            metavar=metavar,
            **kw,
        )

    def __call__(self, parser, namespace, value, option_string=None):
        items = getattr(namespace, self.dest)
        try:
            k, v = value.split('=', 1)
        except ValueError:
            raise argparse.ArgumentError(self, f'expected KEY=VALUE, got: {value}')

        subitem = items
        kl = k.split('.')
        for k in kl[:-1]:
            subitem = subitem.setdefault(k, {})
        subitem[kl[-1]] = yaml.safe_load(v)

        setattr(namespace, self.dest, items)
