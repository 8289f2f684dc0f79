# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import collections
import json
import logging
import re

from typing import Any

import httpx


logger = logging.getLogger(__name__)


class DebugMessages:
    """
    Ordered queue of debug lines waiting to be written.

    Lines are appended by whatever issues HTTP requests and drained by the
    command before it writes a result, warning or error.
    """

    def __init__(self) -> None:
        self._queue: collections.deque[str] = collections.deque()

    def __len__(self) -> int:
        return len(self._queue)

    def enqueue(self, message: str) -> None:
        self._queue.append(message)

    def try_dequeue(self) -> str | None:
        try:
            return self._queue.popleft()
        except IndexError:
            return None

    def drain_all(self) -> list[str]:
        ret = []
        while (message := self.try_dequeue()) is not None:
            ret.append(message)
        return ret


class RecordingTracingInterceptor:
    redacted = '<redacted>'
    _re_secret = re.compile(r'(client_secret=)[^&]*')
    _secret_keys = frozenset(('access_token', 'refresh_token', 'id_token', 'client_secret'))

    def __init__(self, debug_messages: DebugMessages, enabled: bool = True) -> None:
        self.debug_messages = debug_messages
        self.enabled = enabled

    def send_request(self, request: httpx.Request) -> None:
        if self.enabled:
            self.debug_messages.enqueue(self.format_request(request))

    def receive_response(self, response: httpx.Response) -> None:
        if self.enabled:
            self.debug_messages.enqueue(self.format_response(response))

    @classmethod
    def format_request(cls, request: httpx.Request) -> str:
        return '\n'.join((
            '============================ HTTP REQUEST ============================',
            '',
            'HTTP Method:',
            request.method,
            '',
            'Absolute Uri:',
            str(request.url),
            '',
            'Headers:',
            cls._format_headers(request.headers),
            '',
            'Body:',
            cls._format_body(request.headers, request.content),
            '',
        ))

    @classmethod
    def format_response(cls, response: httpx.Response) -> str:
        return '\n'.join((
            '============================ HTTP RESPONSE ============================',
            '',
            'Status Code:',
            f'{response.status_code} {response.reason_phrase}',
            '',
            'Headers:',
            cls._format_headers(response.headers),
            '',
            'Body:',
            cls._format_body(response.headers, response.content),
            '',
        ))

    @classmethod
    def _format_headers(cls, headers: httpx.Headers) -> str:
        lines = []
        for key, value in headers.items():
            if key.lower() == 'authorization':
                value = cls.redacted
            lines.append(f'{key:<30}: {value}')
        return '\n'.join(lines)

    @classmethod
    def _format_body(cls, headers: httpx.Headers, content: bytes) -> str:
        if not content:
            return ''
        text = content.decode('utf-8', errors='replace')
        content_type = headers.get('content-type', '')
        if content_type.startswith('application/x-www-form-urlencoded'):
            return cls._re_secret.sub(rf'\1{cls.redacted}', text)
        if content_type.startswith('application/json'):
            try:
                return json.dumps(cls._redact_json(json.loads(text)), indent=2)
            except ValueError:
                pass
        return text

    @classmethod
    def _redact_json(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: cls.redacted if k in cls._secret_keys else cls._redact_json(v)
                for k, v in data.items()
            }
        if isinstance(data, list):
            return [cls._redact_json(i) for i in data]
        return data


class TracingDispatcher:
    """
    Attachment point between HTTP clients and the tracing interceptor.

    Clients call into the dispatcher through httpx event hooks.  Only one
    interceptor may be attached at any time, which means only one command may
    be processing per session.
    """

    is_enabled: bool

    def __init__(self) -> None:
        self.is_enabled = False
        self._interceptor: RecordingTracingInterceptor | None = None

    @property
    def interceptor(self) -> RecordingTracingInterceptor | None:
        return self._interceptor

    def add(self, interceptor: RecordingTracingInterceptor) -> None:
        if self._interceptor is not None and self._interceptor is not interceptor:
            raise RuntimeError('Another tracing interceptor is already attached')
        self._interceptor = interceptor

    def remove(self, interceptor: RecordingTracingInterceptor | None) -> None:
        if interceptor is not None and self._interceptor is interceptor:
            self._interceptor = None

    def event_hooks(self) -> dict[str, list]:
        return {
            'request': [self.send_request],
            'response': [self.receive_response],
        }

    async def send_request(self, request: httpx.Request) -> None:
        interceptor = self._interceptor
        if self.is_enabled and interceptor is not None:
            interceptor.send_request(request)

    async def receive_response(self, response: httpx.Response) -> None:
        interceptor = self._interceptor
        if self.is_enabled and interceptor is not None and interceptor.enabled:
            await response.aread()
            interceptor.receive_response(response)
