# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import argparse
import asyncio
import enum
import json
import logging
import os
import sys
import uuid

from typing import (
    Any,
    ClassVar,
)

import marshmallow
import yaml

from .breaking_change import InvocationInfo, command_name, process_breaking_changes
from .errors import (
    classify,
    ErrorCategory,
    ErrorRecord,
    Terminating,
    TerminatingError,
)
from .registry import CliRegistry
from .registry import CliCommand
from ..api.registry import registry as api_registry
from ..backend.partner import PartnerEnvironment
from ..session import PartnerSession
from ..utils import argparse_ext
from ..utils.cancellation import CancellationSource, CancellationToken
from ..utils.config import Config
from ..utils.tracing import RecordingTracingInterceptor


logger = logging.getLogger(__name__)


cli = CliRegistry(
    argparse.ArgumentParser(
        allow_abbrev=False,
        prog='partnercenter',
        formatter_class=argparse.RawTextHelpFormatter,
    ),
    arguments=[
        CliRegistry.prepare_argument(
            '--config',
            action=argparse_ext.HashAction,
            help='override config option',
        ),
        CliRegistry.prepare_argument(
            '--config-file',
            action='append',
            dest='config_files',
            help='use config file',
            metavar='FILE',
        ),
        CliRegistry.prepare_argument(
            '--config-section',
            help='use section from config file',
            metavar='SECTION',
        ),
        CliRegistry.prepare_argument(
            '--environment',
            action=argparse_ext.ActionEnum,
            enum=PartnerEnvironment,
            help='use Partner Center environment',
        ),
        CliRegistry.prepare_argument(
            '--output-format',
            choices=['yaml', 'json'],
            default='yaml',
            help='format of written objects (default: yaml)',
        ),
        CliRegistry.prepare_argument(
            '--debug',
            action='store_true',
            help='enable debug output, including HTTP traces',
        ),
    ]
)


cli_internal = cli.register_subparsers(
    'internal',
    help='',
)


SUPPRESS_BREAKING_CHANGE_WARNINGS_ENV = 'PARTNERCENTER_SUPPRESS_BREAKING_CHANGE_WARNINGS'


class CommandState(enum.Enum):
    created = 'created'
    begun = 'begun'
    processing = 'processing'
    ended = 'ended'
    stopped = 'stopped'


class BaseCommand(CliCommand):
    """
    Base of all commands talking to Partner Center.

    A command is invoked once.  Calling it runs :meth:`begin`,
    :meth:`process` and :meth:`end`; an interrupt calls :meth:`stop` instead
    of waiting for the work to finish.  Subclasses put their work into the
    coroutine :meth:`execute` and report results with :meth:`write_object`.

    Everything written by a command first flushes the debug messages that
    piled up in the session, so HTTP traces always show up before the result
    or error they belong to.
    """

    _marker = object()

    parameters_schema: ClassVar[type[marshmallow.Schema] | None] = None

    bound_parameters: dict[str, Any]
    errors: list[ErrorRecord]
    session: PartnerSession
    state: CommandState

    def __init__(
            self, *,
            config={},
            config_files=[],
            config_section=None,
            environment: PartnerEnvironment | None = None,
            output_format: str = 'yaml',
            debug: bool = False,
            session: PartnerSession | None = None,
            **kw,
    ) -> None:
        super().__init__(**kw)

        logging.basicConfig(
            level=debug and logging.DEBUG or logging.INFO,
            format='%(asctime)s %(levelname)s %(message)s',
        )

        config_overrides = [config]
        config_overrides.insert(0, self.config_env())
        self._config = Config(overrides=config_overrides)
        if config_files:
            self._config.read(*config_files)
        else:
            self._config.read_defaults()

        if config_section:
            self.config = self._config[f'_name={config_section}']
        else:
            self.config = self._config[None]

        self.debug = debug
        self.output_format = output_format
        self.session = session or self.session_from_config(environment)

        self.bound_parameters = {}
        self.errors = []
        self.state = CommandState.created

        self._cancellation_source: CancellationSource | None = None
        self._cancellation_token: CancellationToken | None = None
        self._correlation_id: uuid.UUID | None = None
        self._tracing_interceptor: RecordingTracingInterceptor | None = None

    def __config_env_compat(self, subitem, kin, key):
        v = os.environ.get(kin)
        if v is not None:
            kl = key.split('.')
            for k in kl[:-1]:
                subitem = subitem.setdefault(k, {})
            subitem[kl[-1]] = v

    def config_env(self):
        ret = {}

        self.__config_env_compat(
            ret, 'AZURE_TENANT_ID', 'auth.tenant')
        self.__config_env_compat(
            ret, 'AZURE_CLIENT_ID', 'auth.client')
        self.__config_env_compat(
            ret, 'AZURE_CLIENT_SECRET', 'auth.secret')

        for k, v in os.environ.items():
            if k.startswith('PARTNERCENTER_CONFIG_'):
                subitem = ret
                kl = [i.lower() for i in k.split('_')[2:]]
                for k in kl[:-1]:
                    subitem = subitem.setdefault(k, {})
                subitem[kl[-1]] = v

        return ret

    def config_get(self, *keys, default=_marker):
        for key in keys:
            ret = self.config.get(key, self._marker)
            if ret != self._marker:
                return ret
        if default == self._marker and self.argparser is not None:
            self.argparser.error(f'the following config option is required: {keys[0]}')
        return default

    def session_from_config(self, environment: PartnerEnvironment | None = None) -> PartnerSession:
        if environment is None:
            environment = PartnerEnvironment[self.config_get('environment', default='GlobalCloud')]
        client = self.config_get('auth.client', default=None)
        tenant = self.config_get('auth.tenant', default=None)
        return PartnerSession.from_credentials(
            environment=environment,
            tenant=tenant and str(tenant),
            client_id=client and str(client),
            client_secret=self.config_get('auth.secret', default=None),
        )

    def bind_parameters(self, **params: Any) -> dict[str, Any]:
        """
        Validate the parameters given to the command.

        Parameters set to None count as not given.  Raises
        marshmallow.ValidationError before anything is sent anywhere.
        """
        bound = {k: v for k, v in params.items() if v is not None}
        if self.parameters_schema is not None:
            bound = self.parameters_schema().load(bound)
        self.bound_parameters = bound
        return bound

    @property
    def invocation_info(self) -> InvocationInfo:
        return InvocationInfo(
            command_name=command_name(type(self)) or type(self).__name__,
            bound_parameters=dict(self.bound_parameters),
        )

    @property
    def cancellation_token(self) -> CancellationToken:
        if self._cancellation_token is None:
            raise RuntimeError('Command has not begun')
        return self._cancellation_token

    @property
    def correlation_id(self) -> uuid.UUID:
        if self._correlation_id is None:
            raise RuntimeError('Command has not begun')
        return self._correlation_id

    def __enter__(self) -> BaseCommand:
        return self

    def __exit__(self, *exc) -> None:
        self.dispose()

    def __call__(self) -> int | None:
        try:
            self.begin()
            self.process()
        except KeyboardInterrupt:
            self.stop()
            raise
        finally:
            self.end()
        return 1 if self.errors else 0

    def dispose(self) -> None:
        if self._cancellation_source is not None:
            self._cancellation_source.close()
            self._cancellation_source = None

    def begin(self) -> None:
        if self._cancellation_source is None:
            self._cancellation_source = CancellationSource()
            self._cancellation_token = self._cancellation_source.token

        if self._correlation_id is None:
            self._correlation_id = uuid.uuid4()

        if self._tracing_interceptor is None:
            self._tracing_interceptor = RecordingTracingInterceptor(self.session.debug_messages, enabled=self.debug)

        self.session.tracing.is_enabled = True
        self.session.tracing.add(self._tracing_interceptor)
        self.state = CommandState.begun
        logger.debug('Begin %s with correlation id %s', self.invocation_info.command_name, self._correlation_id)

        if os.environ.get(SUPPRESS_BREAKING_CHANGE_WARNINGS_ENV, '').lower() not in ('1', 'true'):
            process_breaking_changes(type(self), self.invocation_info, self.write_warning)

    def process(self) -> None:
        self.state = CommandState.processing
        try:
            asyncio.run(self._execute())
        except (Exception, KeyboardInterrupt) as e:
            outcome = classify(e)
            if isinstance(outcome, Terminating):
                raise
            self.write_exception_error(outcome.error)

    async def _execute(self) -> None:
        try:
            await self.execute()
        except asyncio.CancelledError:
            # Work running in worker threads only observes the token
            if self._cancellation_source is not None and not self._cancellation_source.is_cancellation_requested:
                self._cancellation_source.cancel()
            raise

    async def execute(self) -> None:
        pass

    def end(self) -> None:
        self.session.tracing.remove(self._tracing_interceptor)
        self._teardown()
        if self.state is not CommandState.stopped:
            self.state = CommandState.ended

    def stop(self) -> None:
        self._teardown()
        self.state = CommandState.stopped

    def _teardown(self) -> None:
        if self._cancellation_source is not None:
            if not self._cancellation_source.is_cancellation_requested:
                self._cancellation_source.cancel()

            self._cancellation_source.close()
            self._cancellation_source = None

    def flush_debug_messages(self) -> None:
        for message in self.session.debug_messages.drain_all():
            self.write_debug(message)

    def write_debug(self, text: str) -> None:
        logger.debug(text)

    def write_warning(self, text: str) -> None:
        self.flush_debug_messages()
        logger.warning(text)

    def write_error(self, record: ErrorRecord) -> None:
        self.flush_debug_messages()
        self.errors.append(record)
        logger.error(record.message)

    def write_exception_error(self, exc: Exception) -> None:
        self.write_error(ErrorRecord(exc, '', ErrorCategory.CLOSE_ERROR))

    def throw_terminating_error(self, record: ErrorRecord) -> None:
        self.flush_debug_messages()
        self.errors.append(record)
        raise TerminatingError(record)

    def write_object(self, obj: Any, enumerate_collection: bool = False) -> None:
        self.flush_debug_messages()
        if enumerate_collection and isinstance(obj, (list, tuple)):
            for item in obj:
                self._write_one(item)
        else:
            self._write_one(obj)

    def _write_one(self, obj: Any) -> None:
        data = api_registry.dump(obj) if api_registry.is_registered(obj) else obj
        if self.output_format == 'json':
            print(json.dumps(data, indent=2, sort_keys=True), file=sys.stdout)
        else:
            yaml.safe_dump(data, sys.stdout, explicit_start=True)
