from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from live_shopping.api.utils import ApiFailure, ApiValidationFailure, make_response
from live_shopping.utils.app_errors import (
    AppError,
    AppErrorCode,
    ProviderError,
    ValidationError,
)


def collect_field_errors(errors: Iterable[dict[str, Any]]) -> dict[str, list[str]]:
    """Group pydantic error entries by dotted field path (the "body" root is dropped)."""
    fields: dict[str, list[str]] = defaultdict(list)
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in {"body", "query", "path"} and len(loc) > 1:
            loc = loc[1:]
        fields[".".join(loc) or "non_field_errors"].append(str(error.get("msg", "Invalid value")))
    return dict(fields)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Convert AppError to ApiFailure and return via make_response."""
    log_msg = f"{exc.errcode} {exc.erresid} msg={exc.errmesg} caller={exc.caller_info}"
    if isinstance(exc, ProviderError):
        logger.error(
            f"{log_msg} provider_status={exc.provider_status} provider_body={exc.provider_body}"
        )
    elif exc.errcode == AppErrorCode.E_INTERNAL_ERROR.value:
        logger.error(log_msg)
    else:
        logger.warning(log_msg)

    if isinstance(exc, ValidationError):
        failure: ApiFailure = ApiValidationFailure(
            errcode=exc.errcode, errmesg=exc.errmesg, erresid=exc.erresid, errors=exc.fields
        )
    else:
        failure = ApiFailure(errcode=exc.errcode, errmesg=exc.errmesg, erresid=exc.erresid)
    return make_response(failure, status_code=exc.status_code)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests as the app's ValidationError (400 with a per-field map)."""
    logger.debug("Request validation errors: {}", exc.errors())
    return await app_error_handler(request, ValidationError(collect_field_errors(exc.errors())))
