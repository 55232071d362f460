import sys
from functools import lru_cache
from os import environ
from pathlib import Path
from typing import Any, Literal
from uuid import uuid4

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from loguru import logger
from pydantic import BaseModel, Field

from live_shopping.utils.app_errors import AppErrorCode

E_INTERNAL = AppErrorCode.E_INTERNAL_ERROR.value
E_INVALID_PARAMS = AppErrorCode.E_INVALID_PARAMS.value


class ApiResponse(BaseModel):
    version: str | None = Field(default_factory=lambda: environ.get("BUILD_COMMIT", "dev"))


class ApiSuccess(ApiResponse):
    success: Literal[True] = True
    results: Any = "OK"


class ApiFailure(ApiResponse):
    success: Literal[False] = False
    errcode: str = E_INTERNAL
    erresid: str = Field(default_factory=lambda: uuid4().hex[:10])
    errmesg: str = "We are sorry, an error occurred."


class ApiValidationFailure(ApiFailure):
    """400 body listing messages per offending field."""

    errcode: str = E_INVALID_PARAMS
    errors: dict[str, list[str]] = Field(default_factory=dict)


def api_failure(errcode: str = E_INTERNAL, errmesg: str | None = None) -> ApiFailure:
    """Build an ApiFailure and log it with the caller's location."""
    failure = ApiFailure(errcode=errcode)
    if errmesg:
        failure.errmesg = errmesg

    caller = sys._getframe(1)
    caller_info = (
        f"{caller.f_globals.get('__name__', '?')}:{caller.f_code.co_name}:{caller.f_lineno}"
    )
    logger.warning(f"{failure.errcode} {failure.erresid} {failure.errmesg} caller={caller_info}")
    return failure


def make_response(results: BaseModel, *, status_code: int | None = None) -> ORJSONResponse:
    if status_code is None:
        if isinstance(results, ApiFailure):
            status_code = 500 if results.errcode == E_INTERNAL else 400
        else:
            status_code = 200

    return ORJSONResponse(status_code=status_code, content=results.model_dump(mode="json"))


def get_all_routes_info(app: FastAPI) -> list[dict[str, Any]]:
    routes_info = []

    for route in app.routes:
        if hasattr(route, "methods"):
            endpoint = getattr(route, "endpoint", None)
            routes_info.append(
                {
                    "methods": sorted(route.methods),  # type: ignore[attr-defined]
                    "path": route.path,  # type: ignore[attr-defined]
                    "endpoint": getattr(endpoint, "__name__", str(endpoint)),
                }
            )

    return routes_info


def log_routes(app: FastAPI) -> None:
    for route_info in get_all_routes_info(app):
        methods = ",".join(route_info["methods"])
        logger.info(
            "Loaded route: {:<12} {:<60} {}", methods, route_info["path"], route_info["endpoint"]
        )


@lru_cache
def get_worker_info() -> tuple[str, str]:
    project_root = Path(__file__).parent.parent.parent
    worker_name = environ.get("WORKER_NAME", project_root.name)

    parts = environ.get("BUILD_COMMIT", "").split("-")
    commit_id = parts[1] if len(parts) > 1 else "dev"

    return worker_name, commit_id


def init_logger(debug: bool) -> None:
    logger.remove()

    worker_name, commit_id = get_worker_info()

    if debug:
        logger_level = "DEBUG"
        logger_format = (
            f"<yellow>{worker_name}:{commit_id}</yellow> | "
            "<green>{time:MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )
    else:
        logger_level = "INFO"
        logger_format = (
            f"{worker_name}:{commit_id} | "
            "{time:MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{name}:{function}:{line} | "
            "{message}"
        )
    logger.add(sys.stderr, level=logger_level, format=logger_format)
