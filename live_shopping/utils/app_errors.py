"""Application error types.

Every error raised by the domain and integration layers is an ``AppError``.
The API layer converts them into ``ApiFailure`` responses.
"""

import inspect
from enum import Enum, IntEnum
from typing import Any
from uuid import uuid4


class HttpStatusCode(IntEnum):
    OK = 200
    CREATED = 201
    BAD_REQUEST = 400
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_PARAMS = "E_INVALID_PARAMS"
    E_LIVE_REQUEST_NOT_FOUND = "E_LIVE_REQUEST_NOT_FOUND"
    E_INVALID_STATE = "E_INVALID_STATE"
    E_PROVIDER_ERROR = "E_PROVIDER_ERROR"
    E_PROVIDER_NOT_CONFIGURED = "E_PROVIDER_NOT_CONFIGURED"


def _caller_info(depth: int) -> str:
    frame = inspect.currentframe()
    for _ in range(depth):
        if frame is None:
            break
        frame = frame.f_back
    if frame is None:
        return "unknown"
    module = frame.f_globals.get("__name__", "unknown")
    return f"{module}:{frame.f_code.co_name}:{frame.f_lineno}"


class AppError(Exception):
    """Base application error carrying an error code and HTTP status."""

    default_errcode: AppErrorCode = AppErrorCode.E_INTERNAL_ERROR
    default_status_code: HttpStatusCode = HttpStatusCode.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        errmesg: str,
        *,
        errcode: AppErrorCode | str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(errmesg)
        code = errcode or self.default_errcode
        self.errcode: str = code.value if isinstance(code, AppErrorCode) else str(code)
        self.errmesg = errmesg
        self.status_code = int(status_code or self.default_status_code)
        self.erresid = uuid4().hex[:10]
        # Skip this frame and subclass __init__ frames to reach the raise site.
        depth = 2
        for klass in type(self).__mro__:
            if klass is AppError:
                break
            if "__init__" in klass.__dict__:
                depth += 1
        self.caller_info = _caller_info(depth)

    def __str__(self) -> str:
        return f"{self.errcode}: {self.errmesg}"


class ValidationError(AppError):
    """Malformed request payload. ``fields`` maps each offending field to its messages."""

    default_errcode = AppErrorCode.E_INVALID_PARAMS
    default_status_code = HttpStatusCode.BAD_REQUEST

    def __init__(self, fields: dict[str, list[str]], errmesg: str | None = None):
        self.fields = fields
        super().__init__(errmesg or f"Invalid fields: {', '.join(sorted(fields))}")


class NotFoundError(AppError):
    default_errcode = AppErrorCode.E_LIVE_REQUEST_NOT_FOUND
    default_status_code = HttpStatusCode.NOT_FOUND


class InvalidStateError(AppError):
    default_errcode = AppErrorCode.E_INVALID_STATE
    default_status_code = HttpStatusCode.CONFLICT


class ProviderError(AppError):
    """Non-success response (or transport failure) from the conferencing provider."""

    default_errcode = AppErrorCode.E_PROVIDER_ERROR
    default_status_code = HttpStatusCode.BAD_GATEWAY

    def __init__(
        self,
        errmesg: str,
        *,
        provider_status: int | None = None,
        provider_body: Any = None,
        errcode: AppErrorCode | str | None = None,
    ):
        self.provider_status = provider_status
        self.provider_body = provider_body
        super().__init__(errmesg, errcode=errcode)
