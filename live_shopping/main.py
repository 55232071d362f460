import time
import uuid
from contextlib import asynccontextmanager
from os import environ

import logfire
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from granian import Granian
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from live_shopping.api import health
from live_shopping.api.errors import app_error_handler, request_validation_error_handler
from live_shopping.api.utils import api_failure, init_logger, log_routes
from live_shopping.api.v1.routers import live_request
from live_shopping.app_config import get_app_environ_config
from live_shopping.domain.live_request.live_request_domain import LiveRequestService
from live_shopping.services.integrations.dyte_service import DyteClient
from live_shopping.storage.live_request_repo import LiveRequestRepository
from live_shopping.storage.postgres import get_postgres_manager
from live_shopping.utils.app_errors import AppError, AppErrorCode

cfg = get_app_environ_config()


class HTTPLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with a short id and turns unhandled errors into a 500 envelope."""

    async def dispatch(self, request: Request, call_next):  # type: ignore
        request_id = uuid.uuid4().hex[:8]
        started = time.perf_counter()
        route = f"{request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.exception(
                f"[{request_id}] {route} unhandled {type(exc).__name__} after {elapsed_ms:.2f}ms"
            )
            failure = api_failure(
                errcode=AppErrorCode.E_INTERNAL_ERROR.value,
                errmesg=f"Internal server error (request_id: {request_id})",
            )
            return ORJSONResponse(status_code=500, content=failure.model_dump())

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"[{request_id}] {route} -> {response.status_code} in {elapsed_ms:.2f}ms")
        response.headers["X-Request-ID"] = request_id
        return response


@asynccontextmanager
async def lifespan(server: FastAPI):
    init_logger(cfg.DEBUG)

    logger.info("Application startup...")

    pg_manager = get_postgres_manager()
    repository = LiveRequestRepository(pg_manager, cfg.POSTGRES_LABEL)
    await repository.init_schema()

    dyte = DyteClient.from_config(cfg)
    server.state.live_request_service = LiveRequestService(repository, dyte, cfg)

    log_routes(server)

    if cfg.LOGFIRE_ENABLE:
        logger.info("Logfire initializing")

        logfire.configure(
            token=cfg.LOGFIRE_TOKEN,
            service_name="live-shopping",
            service_version=environ.get("BUILD_COMMIT") or "dev",
        )
        logfire.instrument_fastapi(server, capture_headers=True)
        logfire.instrument_asyncpg()
        logfire.instrument_httpx()

    yield

    logger.info("Application shutdown...")

    await dyte.aclose()
    await pg_manager.close_all()


app = FastAPI(
    version="1.0",
    title="Live Shopping API",
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

app.add_middleware(HTTPLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,  # type: ignore
    allow_origins=cfg.API_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RequestValidationError, request_validation_error_handler)  # type: ignore
app.add_exception_handler(AppError, app_error_handler)  # type: ignore

app.include_router(health.router)
app.include_router(live_request.router, prefix=cfg.API_PREFIX)


def build_granian_kwargs():
    return {
        "interface": "asgi",
        "address": cfg.API_HOST,
        "port": cfg.API_PORT,
        "workers": cfg.API_WORKERS,
        "reload": cfg.DEBUG,
    }


if __name__ == "__main__":
    Granian("live_shopping.main:app", **build_granian_kwargs()).serve()
