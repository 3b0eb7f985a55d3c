# src/rootshare/core/result.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

"""
Explicit success/failure values returned by every file operation.

Services never raise for expected failures (bad path, missing file, name
conflict). They return ``Err`` tagged with an ``ErrorKind`` and the HTTP
layer maps the kind to a status code.
"""

import functools
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

from .exceptions import OperationCancelled

log = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    INVALID_PATH = "invalid_path"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    ACCESS_DENIED = "access_denied"
    UNEXPECTED = "unexpected"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.INVALID_PATH: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_EXISTS: 400,
    ErrorKind.ACCESS_DENIED: 500,
    ErrorKind.UNEXPECTED: 500,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def invalid_path(cls, message: str = "Invalid path") -> "Err":
        return cls(ErrorKind.INVALID_PATH, message)

    @classmethod
    def not_found(cls, message: str = "File or directory not found") -> "Err":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def already_exists(cls, message: str) -> "Err":
        return cls(ErrorKind.ALREADY_EXISTS, message)

    @classmethod
    def from_os_error(cls, error: OSError, action: str) -> "Err":
        """Maps a platform error raised while performing ``action`` to a tagged failure."""
        if isinstance(error, PermissionError):
            return cls(ErrorKind.ACCESS_DENIED, f"Permission denied while trying to {action}")
        if isinstance(error, FileNotFoundError):
            return cls(ErrorKind.NOT_FOUND, f"File or directory not found while trying to {action}")
        reason = error.strerror or str(error)
        return cls(ErrorKind.UNEXPECTED, f"Failed to {action}: {reason}")


Result = Union[Ok[T], Err]


def guard_operation(action: str):
    """
    Converts any exception escaping a service operation into an ``Err``.

    ``OperationCancelled`` is re-raised: the caller is gone and there is no one
    to report a result to.
    """

    def _convert(error: Exception) -> Err:
        if isinstance(error, OSError):
            log.error(f"Failed to {action}: {error}")
            return Err.from_os_error(error, action)
        log.exception(f"Unexpected error while trying to {action}")
        return Err(ErrorKind.UNEXPECTED, f"Failed to {action}: {error}")

    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except OperationCancelled:
                    raise
                except Exception as e:
                    return _convert(e)
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except OperationCancelled:
                raise
            except Exception as e:
                return _convert(e)
        return wrapper

    return decorator
