# SPDX-License-Identifier: GPL-2.0-or-later

from __future__ import annotations

import dataclasses
import enum

from typing import Any


class ErrorCategory(enum.Enum):
    NOT_SPECIFIED = 'NotSpecified'
    CLOSE_ERROR = 'CloseError'
    INVALID_ARGUMENT = 'InvalidArgument'
    OPERATION_STOPPED = 'OperationStopped'


@dataclasses.dataclass(frozen=True)
class ErrorRecord:
    exception: BaseException
    error_id: str = ''
    category: ErrorCategory = ErrorCategory.NOT_SPECIFIED
    target_object: Any = None

    @property
    def message(self) -> str:
        return str(self.exception) or self.exception.__class__.__name__


class PipelineStoppedError(Exception):
    """
    The surrounding pipeline is shutting down.

    Raised bare, it terminates the command.  Raised from another exception,
    it is reported like any other failure.
    """

    def __init__(self, message: str = 'The pipeline has been stopped.') -> None:
        super().__init__(message)


class TerminatingError(Exception):
    def __init__(self, record: ErrorRecord) -> None:
        super().__init__(record.message)
        self.record = record


@dataclasses.dataclass(frozen=True)
class Recoverable:
    error: Exception


@dataclasses.dataclass(frozen=True)
class Terminating:
    reason: BaseException


def classify(exc: BaseException) -> Recoverable | Terminating:
    if isinstance(exc, PipelineStoppedError) and exc.__cause__ is None:
        return Terminating(exc)
    if isinstance(exc, (TerminatingError, KeyboardInterrupt)):
        return Terminating(exc)
    if not isinstance(exc, Exception):
        return Terminating(exc)
    return Recoverable(exc)
