# SPDX-License-Identifier: GPL-2.0-or-later

"""
Cooperative cancellation for command invocations.

A :class:`CancellationSource` is owned by one command invocation.  Code doing
the actual work only ever sees the read-only :class:`CancellationToken` and is
expected to check it at its suspension points.  Nothing is interrupted
forcibly.
"""

from __future__ import annotations

import logging
import threading


logger = logging.getLogger(__name__)


class OperationCancelledError(Exception):
    pass


class CancellationToken:
    __source: CancellationSource

    def __init__(self, source: CancellationSource) -> None:
        self.__source = source

    @property
    def is_cancellation_requested(self) -> bool:
        return self.__source.is_cancellation_requested

    def raise_if_cancellation_requested(self) -> None:
        if self.is_cancellation_requested:
            raise OperationCancelledError('The operation was cancelled')


class CancellationSource:
    __event: threading.Event
    __closed: bool

    def __init__(self) -> None:
        self.__event = threading.Event()
        self.__closed = False

    @property
    def closed(self) -> bool:
        return self.__closed

    @property
    def is_cancellation_requested(self) -> bool:
        return self.__event.is_set()

    @property
    def token(self) -> CancellationToken:
        return CancellationToken(self)

    def cancel(self) -> None:
        if self.__closed:
            raise RuntimeError('Cancellation source is already closed')
        logger.debug('Cancellation requested')
        self.__event.set()

    def close(self) -> None:
        self.__closed = True
