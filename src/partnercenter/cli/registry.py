# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from collections.abc import (
    Callable,
    Sequence,
)
from typing import (
    Any,
    ClassVar,
    TypeVar,
)

import marshmallow

from . import breaking_change
from .errors import PipelineStoppedError, TerminatingError


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class _ActionWrapper:
    args: tuple
    kw: dict


class CliCommand:
    argparser: argparse.ArgumentParser | None
    verb: ClassVar[str | None] = None
    noun: ClassVar[str | None] = None

    def __init__(self, *, argparser: argparse.ArgumentParser | None = None) -> None:
        self.argparser = argparser

    def __call__(self) -> int | None:
        if self.argparser is not None:
            self.argparser.print_help()
        raise NotImplementedError

    def error(self, message: str) -> None:
        if self.argparser is not None:
            self.argparser.error(message)
        raise NotImplementedError


CliCommandT = TypeVar('CliCommandT', bound=type[CliCommand])


def format_validation_error(error: marshmallow.ValidationError) -> str:
    messages = error.messages
    if not isinstance(messages, dict):
        return ' '.join(str(i) for i in messages)
    ret = []
    for field, field_messages in sorted(messages.items()):
        option = '--' + str(field).replace('_', '-')
        ret.append(f'argument {option}: {" ".join(str(i) for i in field_messages)}')
    return '; '.join(ret)


class CliRegistry:
    parser: argparse.ArgumentParser
    subparsers: argparse._SubParsersAction
    arguments: list[_ActionWrapper]

    def __init__(
        self,
        parser: argparse.ArgumentParser,
        arguments: list[_ActionWrapper] = [],
    ) -> None:
        self.parser = parser
        self.arguments = arguments[:]

        parser.set_defaults(__cls=CliCommand, argparser=parser)
        self.subparsers = parser.add_subparsers()

    @staticmethod
    def prepare_argument(*args, **kw) -> _ActionWrapper:
        return _ActionWrapper(args, kw)

    def register(
        self,
        name: str | None = None,
        help: str = '',
        arguments: list[_ActionWrapper] = [],
        usage: str = '%(prog)s',
        epilog: str | None = None,
        *,
        verb: str | None = None,
        noun: str | None = None,
    ) -> Callable[[CliCommandT], CliCommandT]:
        if name is None:
            if not (verb and noun):
                raise ValueError('Either name or verb and noun are required')
            name = f'{verb}-{noun}'

        aliases = [name.lower()] if name.lower() != name else []
        parser = self.subparsers.add_parser(
            prog=f'{self.parser.prog} {name}',
            name=name,
            aliases=aliases,
            help=help,
            usage=usage,
            epilog=epilog or self.parser.epilog,
            formatter_class=argparse.RawTextHelpFormatter,
        )

        for w in arguments + self.arguments:
            parser.add_argument(*w.args, **w.kw)

        def wrap(cls: CliCommandT) -> CliCommandT:
            if verb and noun:
                cls.verb = verb
                cls.noun = noun
            notices = breaking_change.format_help(cls)
            if notices:
                parser.epilog = '\n\n'.join(i for i in (parser.epilog, notices) if i)
            parser.set_defaults(__cls=cls, argparser=parser)
            cls.__argparser = parser
            return cls

        return wrap

    def register_subparsers(
        self,
        name: str,
        help: str,
        arguments: list[_ActionWrapper] = [],
        usage: str = '%(prog)s',
        epilog: str | None = None,
    ) -> CliRegistry:
        # Workaround: add_parser uses the existence of the argument instead of it's value
        kw: dict[str, Any] = {}
        if help:
            kw['help'] = help
        parser = self.subparsers.add_parser(
            prog=f'{self.parser.prog} {name}',
            name=name,
            usage=usage,
            epilog=epilog,
            formatter_class=argparse.RawTextHelpFormatter,
            **kw,
        )
        return self.__class__(parser, arguments + self.arguments)

    def main(self, cls: CliCommandT | None = None, argv: Sequence[str] | None = None) -> None:
        parser = cls.__argparser if cls else self.parser
        args = parser.parse_args(argv)
        kw = vars(args)
        realcls = kw.pop('__cls')
        argparser = kw['argparser']

        try:
            command = realcls(**kw)
        except marshmallow.ValidationError as e:
            argparser.error(format_validation_error(e))

        try:
            ret = command()
        except KeyboardInterrupt:
            logger.error('Exiting due to keyboard interrupt.')
            sys.exit(130)
        except (PipelineStoppedError, TerminatingError) as e:
            logger.error('%s', e)
            sys.exit(1)

        if ret:
            sys.exit(ret)
