"""Application error types.

`AppError` is the single exception type raised by this package. Each instance
carries an error code, a human readable message, a short random id for log
correlation and the call site that raised it.
"""

from __future__ import annotations

import inspect
from enum import Enum
from uuid import uuid4


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_ARGUMENT = "E_INVALID_ARGUMENT"
    E_MISSING_ARGUMENT = "E_MISSING_ARGUMENT"
    E_CONNECT_FAILED = "E_CONNECT_FAILED"
    E_PUBLISH_FAILED = "E_PUBLISH_FAILED"
    E_UNPUBLISH_FAILED = "E_UNPUBLISH_FAILED"
    E_INVALID_STATE = "E_INVALID_STATE"

    def __str__(self) -> str:
        return self.value


class AppError(Exception):
    """Error raised by the publisher with code, message and caller info."""

    def __init__(
        self,
        errcode: AppErrorCode = AppErrorCode.E_INTERNAL_ERROR,
        errmesg: str = "We are sorry, an error occurred.",
    ) -> None:
        super().__init__(errmesg)
        self.errcode = errcode.value
        self.errmesg = errmesg
        self.erresid = uuid4().hex[:10]
        self.caller_info = _caller_info()

    def __str__(self) -> str:
        return self.errmesg

    def __repr__(self) -> str:
        return f"AppError(errcode={self.errcode}, erresid={self.erresid}, errmesg={self.errmesg!r})"


class UsageError(AppError):
    """Command line arguments were missing or malformed."""

    def __init__(
        self,
        errmesg: str,
        errcode: AppErrorCode = AppErrorCode.E_INVALID_ARGUMENT,
    ) -> None:
        super().__init__(errcode=errcode, errmesg=errmesg)


def _caller_info() -> str:
    # Skip frames belonging to this module (constructors of AppError subclasses)
    for frame_info in inspect.stack()[1:]:
        module = inspect.getmodule(frame_info.frame)
        module_name = (
            module.__name__ if module and getattr(module, "__name__", None) else frame_info.filename
        )
        if module_name == __name__:
            continue
        return f"{module_name}:{frame_info.function}:{frame_info.lineno}"
    return "unknown"


__all__ = ["AppError", "AppErrorCode", "UsageError"]
