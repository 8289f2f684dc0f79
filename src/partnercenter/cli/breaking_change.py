# SPDX-License-Identifier: GPL-2.0-or-later

"""
Breaking change notices for commands.

Notices are declared next to the command they belong to::

    @cli.register(verb='Get', noun='PartnerThing', ...)
    @breaking_change(
        CommandDeprecation(replacement='Get-PartnerOtherThing'),
        ParameterBreakingChange(name='thing_id', replacement='other_id'),
    )
    class GetPartnerThingCommand(BaseCommand):
        ...

At runtime, the command writes every notice that applies to the current
invocation as a warning, framed by a header and a footer.  Notices on a
parameter only apply if the parameter was given.  ``--help`` lists all of
them.
"""

from __future__ import annotations

import dataclasses
import datetime
import logging

from collections.abc import (
    Callable,
    Mapping,
)
from typing import (
    Any,
    TypeVar,
)

from ..utils.typing import WriteFn


logger = logging.getLogger(__name__)


INFORMATION_LINK = 'https://aka.ms/partnercenterps-changewarnings'

HEADER_MESSAGE = "Breaking changes in the command '{}' :"
FOOTER_MESSAGE = 'NOTE : Go to {} for steps to suppress (and other related information on) the breaking change messages.'


T = TypeVar('T', bound=type)


@dataclasses.dataclass(frozen=True)
class InvocationInfo:
    command_name: str
    bound_parameters: Mapping[str, Any] = dataclasses.field(default_factory=dict)


def command_name(cls: type) -> str | None:
    verb = getattr(cls, 'verb', None)
    noun = getattr(cls, 'noun', None)
    if verb and noun:
        return f'{verb}-{noun}'
    return None


@dataclasses.dataclass(frozen=True, kw_only=True)
class BreakingChange:
    change_description: str | None = None
    change_in_effect_by_version: str | None = None
    change_in_effect_by_date: datetime.date | None = None
    old_way: str | None = None
    new_way: str | None = None

    @property
    def member(self) -> str | None:
        """ Name of the parameter this notice is attached to, None for the command itself """
        return None

    def is_applicable(self, invocation: InvocationInfo) -> bool:
        return True

    def specific_message(self) -> str:
        raise NotImplementedError

    def print_info(self, cls: type, is_help: bool, write: WriteFn) -> None:
        if is_help:
            write(f"- Command : '{command_name(cls) or cls.__name__}'")
        write(f'- {self.specific_message()}')

        if self.change_description:
            write(f'  Change description : {self.change_description}')
        if self.change_in_effect_by_date:
            write(f"  This change will take effect on '{self.change_in_effect_by_date:%Y-%m-%d}'")
        if self.change_in_effect_by_version:
            write(f"  The change is expected to take effect from version : '{self.change_in_effect_by_version}'")
        if self.old_way and self.new_way:
            write('  Command invocation changes :')
            write(f'    Old Way : {self.old_way}')
            write(f'    New Way : {self.new_way}')


@dataclasses.dataclass(frozen=True, kw_only=True)
class GenericBreakingChange(BreakingChange):
    message: str

    def specific_message(self) -> str:
        return self.message


@dataclasses.dataclass(frozen=True, kw_only=True)
class CommandDeprecation(BreakingChange):
    replacement: str | None = None

    def specific_message(self) -> str:
        if self.replacement:
            return f"The command is being deprecated. The replacement command is : '{self.replacement}'"
        return 'The command is being deprecated. There will be no replacement for it.'


@dataclasses.dataclass(frozen=True, kw_only=True)
class OutputBreakingChange(BreakingChange):
    deprecated_output_type: str
    replacement_output_type: str | None = None
    deprecated_properties: tuple[str, ...] = ()
    new_properties: tuple[str, ...] = ()

    def specific_message(self) -> str:
        lines = [f"The output type '{self.deprecated_output_type}' is changing"]
        if self.replacement_output_type:
            lines.append(f"  The new output type is '{self.replacement_output_type}'")
        if self.deprecated_properties:
            props = ' '.join(f"'{i}'" for i in self.deprecated_properties)
            lines.append(f'  The following properties in the output type are being deprecated : {props}')
        if self.new_properties:
            props = ' '.join(f"'{i}'" for i in self.new_properties)
            lines.append(f'  The following properties are being added to the output type : {props}')
        return '\n'.join(lines)


@dataclasses.dataclass(frozen=True, kw_only=True)
class ParameterBreakingChange(BreakingChange):
    name: str
    replacement: str | None = None
    old_type: str | None = None
    new_type: str | None = None

    @property
    def member(self) -> str:
        return self.name

    def is_applicable(self, invocation: InvocationInfo) -> bool:
        return self.name in invocation.bound_parameters

    def specific_message(self) -> str:
        if self.replacement:
            message = f"The parameter : '{self.name}' is being replaced by parameter : '{self.replacement}'."
        else:
            message = f"The parameter : '{self.name}' is changing."
        if self.old_type and self.new_type:
            message += f"\n  The type of the parameter is changing from '{self.old_type}' to '{self.new_type}'."
        return message


class BreakingChangeRegistry:
    _changes: dict[type, list[BreakingChange]]

    def __init__(self) -> None:
        self._changes = {}

    def register(self, *changes: BreakingChange) -> Callable[[T], T]:
        def wrap(cls: T) -> T:
            self._changes.setdefault(cls, []).extend(changes)
            return cls
        return wrap

    def changes(self, cls: type) -> list[BreakingChange]:
        # Notices on the command come before notices on its parameters
        return sorted(self._changes.get(cls, ()), key=lambda c: c.member is not None)


registry = BreakingChangeRegistry()
breaking_change = registry.register


def applicable_breaking_changes(
    cls: type,
    invocation: InvocationInfo | None,
    registry: BreakingChangeRegistry = registry,
) -> list[BreakingChange]:
    changes = registry.changes(cls)
    if invocation is None:
        return changes
    return [c for c in changes if c.is_applicable(invocation)]


def process_breaking_changes(
    cls: type,
    invocation: InvocationInfo | None,
    write: WriteFn,
    is_help: bool = False,
    registry: BreakingChangeRegistry = registry,
) -> list[BreakingChange]:
    changes = applicable_breaking_changes(cls, invocation, registry)

    if changes:
        logger.debug('Found %d breaking changes for %s', len(changes), cls.__name__)
        write(HEADER_MESSAGE.format(command_name(cls) or cls.__name__))
        for change in changes:
            change.print_info(cls, is_help, write)
        write(FOOTER_MESSAGE.format(INFORMATION_LINK))

    return changes


def format_help(cls: type, registry: BreakingChangeRegistry = registry) -> str | None:
    lines: list[str] = []
    process_breaking_changes(cls, None, lines.append, is_help=True, registry=registry)
    return '\n'.join(lines) or None
