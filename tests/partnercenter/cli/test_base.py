# SPDX-License-Identifier: GPL-2.0-or-later

import asyncio
import dataclasses
import httpx
import json
import logging
import pytest
import time
import yaml

from partnercenter.api.pc.agreement import AgreementDocument
from partnercenter.backend.partner import PartnerEnvironment
from partnercenter.backend.partner.client import PartnerAuthServiceAccount
from partnercenter.cli.base import BaseCommand, CommandState, SUPPRESS_BREAKING_CHANGE_WARNINGS_ENV
from partnercenter.cli.breaking_change import GenericBreakingChange, ParameterBreakingChange, breaking_change
from partnercenter.cli.errors import (
    ErrorCategory,
    ErrorRecord,
    PipelineStoppedError,
    TerminatingError,
)


@pytest.fixture
def config_path(tmp_path):
    with tmp_path.joinpath('config.yml').open('w') as f:
        print("""
---
auth:
  tenant: 7122190e-711a-11ef-9288-37554fc77a04
environment: GlobalCloud
---
metadata:
  name: china
environment: ChinaCloud
""", file=f)
    return tmp_path


class AgreementCommand(BaseCommand):
    verb = 'Get'
    noun = 'PartnerTestAgreement'

    async def execute(self):
        async with self.session.client_factory.create_partner_operations(self.correlation_id) as partner:
            document = partner.agreement_templates.by_id('template').document
            self.write_object(await document.get(self.cancellation_token))


class StoppedCommand(BaseCommand):
    async def execute(self):
        raise PipelineStoppedError()


class TerminatingCommand(BaseCommand):
    async def execute(self):
        self.throw_terminating_error(ErrorRecord(ValueError('fatal'), 'Fatal', ErrorCategory.INVALID_ARGUMENT))


class WrappedStoppedCommand(BaseCommand):
    async def execute(self):
        try:
            raise ValueError('inner')
        except ValueError as e:
            raise PipelineStoppedError() from e


class ObjectsCommand(BaseCommand):
    async def execute(self):
        self.write_object([
            AgreementDocument(template_id='one'),
            AgreementDocument(template_id='two'),
        ], enumerate_collection=True)


class InterruptedCommand(BaseCommand):
    def __init__(self, **kw):
        super().__init__(**kw)
        self.results = []

    def wait(self, token):
        deadline = time.monotonic() + 5
        while not token.is_cancellation_requested and time.monotonic() < deadline:
            time.sleep(0.01)
        self.results.append(token.is_cancellation_requested)

    async def execute(self):
        loop = asyncio.get_running_loop()
        work = loop.run_in_executor(None, self.wait, self.cancellation_token)
        loop.call_soon(asyncio.current_task().cancel)
        await work


@dataclasses.dataclass(frozen=True, kw_only=True)
class BrokenNotice(GenericBreakingChange):
    def print_info(self, cls, is_help, write):
        raise RuntimeError(self.message)


@breaking_change(BrokenNotice(message='broken'))
class BrokenNoticeCommand(BaseCommand):
    verb = 'Get'
    noun = 'PartnerBrokenThing'


@breaking_change(ParameterBreakingChange(name='thing_id', replacement='other_id'))
class DeprecatedParameterCommand(BaseCommand):
    verb = 'Get'
    noun = 'PartnerDeprecatedThing'

    def __init__(self, *, thing_id=None, **kw):
        super().__init__(**kw)
        self.bind_parameters(thing_id=thing_id)


def test():
    BaseCommand()


def test_config_get(config_path):
    b = BaseCommand(config_files=[config_path / 'config.yml'])
    v = b.config_get('auth.tenant')
    assert str(v) == '7122190e-711a-11ef-9288-37554fc77a04'
    assert b.session.environment is PartnerEnvironment.GlobalCloud


def test_config_section(config_path):
    b = BaseCommand(config_files=[config_path / 'config.yml'], config_section='china')
    assert b.session.environment is PartnerEnvironment.ChinaCloud


def test_config_get_with_env_override(config_path, monkeypatch):
    monkeypatch.setenv('PARTNERCENTER_CONFIG_auth_tenant', 'contoso.onmicrosoft.com')
    b = BaseCommand(config_files=[config_path / 'config.yml'])
    v = b.config_get('auth.tenant')
    assert v == 'contoso.onmicrosoft.com'


def test_config_env_azure(monkeypatch):
    monkeypatch.setenv('AZURE_TENANT_ID', 'tenant')
    monkeypatch.setenv('AZURE_CLIENT_ID', '00000000-0000-0000-0000-000000000001')
    monkeypatch.setenv('AZURE_CLIENT_SECRET', 'secret')
    b = BaseCommand()
    assert isinstance(b.session.auth, PartnerAuthServiceAccount)
    assert b.session.auth.client_id == '00000000-0000-0000-0000-000000000001'
    assert b.session.auth.tenant == 'tenant'


def test_environment_argument(config_path):
    b = BaseCommand(config_files=[config_path / 'config.yml'], environment=PartnerEnvironment.USGovernment)
    assert b.session.environment is PartnerEnvironment.USGovernment


def test_not_begun():
    b = BaseCommand()
    with pytest.raises(RuntimeError):
        b.cancellation_token
    with pytest.raises(RuntimeError):
        b.correlation_id


class TestLifecycle:
    @pytest.fixture
    def document_response(self):
        return httpx.Response(200, json={
            'templateId': 'template',
            'agreementType': 'MicrosoftCustomerAgreement',
        })

    def test_success(self, make_session, document_response, debug_log, capsys):
        session = make_session(lambda request: document_response)
        command = AgreementCommand(session=session, debug=True)

        assert command() == 0
        assert command.state is CommandState.ended
        assert command.errors == []
        assert session.tracing.interceptor is None
        assert len(session.debug_messages) == 0

        assert yaml.safe_load(capsys.readouterr().out) == {
            'apiVersion': 'partnercenter.microsoft.com/v1',
            'kind': 'AgreementDocument',
            'templateId': 'template',
            'agreementType': 'MicrosoftCustomerAgreement',
        }

        messages = [r.getMessage() for r in debug_log.records if r.levelno == logging.DEBUG]
        assert any('HTTP REQUEST' in m for m in messages)
        assert any('HTTP RESPONSE' in m for m in messages)

    def test_success_json(self, make_session, document_response, capsys):
        session = make_session(lambda request: document_response)
        command = AgreementCommand(session=session, output_format='json')

        assert command() == 0
        assert json.loads(capsys.readouterr().out)['templateId'] == 'template'

    def test_no_debug(self, make_session, document_response, debug_log):
        session = make_session(lambda request: document_response)
        command = AgreementCommand(session=session)

        assert command() == 0

        messages = [r.getMessage() for r in debug_log.records]
        assert not any('HTTP REQUEST' in m for m in messages)

    def test_recoverable_error(self, make_session, debug_log):
        session = make_session(lambda request: httpx.Response(404, json={'code': 'NotFound'}))
        command = AgreementCommand(session=session, debug=True)

        assert command() == 1
        assert command.state is CommandState.ended
        assert session.tracing.interceptor is None

        error, = command.errors
        assert error.category is ErrorCategory.CLOSE_ERROR
        assert isinstance(error.exception, httpx.HTTPStatusError)

        records = [r for r in debug_log.records if r.name == 'partnercenter.cli.base']
        index_request = next(i for i, r in enumerate(records) if 'HTTP REQUEST' in r.getMessage())
        index_response = next(i for i, r in enumerate(records) if 'HTTP RESPONSE' in r.getMessage())
        index_error = next(i for i, r in enumerate(records) if r.levelno == logging.ERROR)
        assert index_request < index_response < index_error

    def test_pipeline_stopped(self, make_session):
        session = make_session(lambda request: httpx.Response(500))
        command = StoppedCommand(session=session)

        with pytest.raises(PipelineStoppedError):
            command()

        assert command.state is CommandState.ended
        assert command.errors == []
        assert session.tracing.interceptor is None

    def test_pipeline_stopped_wrapped(self, make_session):
        command = WrappedStoppedCommand(session=make_session(lambda request: httpx.Response(500)))

        assert command() == 1
        error, = command.errors
        assert isinstance(error.exception, PipelineStoppedError)

    def test_terminating_error(self, make_session):
        command = TerminatingCommand(session=make_session(lambda request: httpx.Response(500)))

        with pytest.raises(TerminatingError) as e:
            command()

        assert e.value.record.error_id == 'Fatal'
        error, = command.errors
        assert error.category is ErrorCategory.INVALID_ARGUMENT

    def test_keyboard_interrupt(self, make_session, monkeypatch):
        session = make_session(lambda request: httpx.Response(500))
        command = BaseCommand(session=session)

        def process():
            raise KeyboardInterrupt

        monkeypatch.setattr(command, 'process', process)

        with pytest.raises(KeyboardInterrupt):
            command()

        assert command.state is CommandState.stopped
        assert session.tracing.interceptor is None

    def test_task_cancelled(self, make_session):
        session = make_session(lambda request: httpx.Response(500))
        command = InterruptedCommand(session=session)

        with pytest.raises(asyncio.CancelledError):
            command()

        assert command.results == [True]
        assert command.state is CommandState.ended
        assert session.tracing.interceptor is None

    def test_stop(self, make_session):
        session = make_session(lambda request: httpx.Response(500))
        command = BaseCommand(session=session)

        command.begin()
        token = command.cancellation_token
        assert session.tracing.is_enabled
        assert session.tracing.interceptor is not None
        assert not token.is_cancellation_requested

        command.stop()
        assert token.is_cancellation_requested
        assert command.state is CommandState.stopped

        command.end()
        assert command.state is CommandState.stopped
        assert session.tracing.interceptor is None

    def test_concurrent(self, make_session):
        session = make_session(lambda request: httpx.Response(500))
        command1 = BaseCommand(session=session)
        command2 = BaseCommand(session=session)

        command1.begin()
        with pytest.raises(RuntimeError):
            command2.begin()
        command1.end()

    def test_context_manager(self, make_session):
        with BaseCommand(session=make_session(lambda request: httpx.Response(500))) as command:
            command.begin()
            token = command.cancellation_token

        assert not token.is_cancellation_requested
        assert command._cancellation_source is None

    def test_write_object_collection(self, make_session, capsys):
        command = ObjectsCommand(session=make_session(lambda request: httpx.Response(500)))

        assert command() == 0

        documents = list(yaml.safe_load_all(capsys.readouterr().out))
        assert [i['templateId'] for i in documents] == ['one', 'two']


class TestBreakingChanges:
    def test_applicable(self, caplog):
        command = DeprecatedParameterCommand(thing_id='thing')

        assert command() == 0

        warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings[0] == "Breaking changes in the command 'Get-PartnerDeprecatedThing' :"
        assert warnings[1] == "- The parameter : 'thing_id' is being replaced by parameter : 'other_id'."
        assert warnings[2].startswith('NOTE : Go to https://aka.ms/partnercenterps-changewarnings')

    def test_not_applicable(self, caplog):
        command = DeprecatedParameterCommand()

        assert command() == 0

        assert not [r for r in caplog.records if r.levelno == logging.WARNING]

    def test_suppressed(self, caplog, monkeypatch):
        monkeypatch.setenv(SUPPRESS_BREAKING_CHANGE_WARNINGS_ENV, 'true')
        command = DeprecatedParameterCommand(thing_id='thing')

        assert command() == 0

        assert not [r for r in caplog.records if r.levelno == logging.WARNING]

    def test_render_error(self, make_session):
        session = make_session(lambda request: httpx.Response(500))
        command = BrokenNoticeCommand(session=session)

        with pytest.raises(RuntimeError, match='broken'):
            command.begin()
        assert session.tracing.interceptor is not None

        command.end()
        assert session.tracing.interceptor is None
        assert command.state is CommandState.ended

    def test_render_error_call(self, make_session):
        session = make_session(lambda request: httpx.Response(500))
        command = BrokenNoticeCommand(session=session)

        with pytest.raises(RuntimeError, match='broken'):
            command()

        assert session.tracing.interceptor is None
        assert command.state is CommandState.ended
        assert command._cancellation_source is None
