"""FastAPI application for the swap quote API.

Note: Rate limiting is not implemented at the application level. It belongs
to the reverse proxy in front of the service.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from swap_api import __version__
from swap_api.api.endpoints import close_default_swap_service, get_settings, router
from swap_api.constants import HEALTH_CHECK_PATH, SWAP_PATH
from swap_api.errors import (
    InternalServerError,
    SwapAPIError,
    ValidationError,
    ValidationErrorCode,
    ValidationErrorItem,
)
from swap_api.logging_config import configure_logging

logger = structlog.get_logger()


async def handle_swap_api_error(request: Request, exc: SwapAPIError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("request_failed", path=request.url.path, error=str(exc))
    else:
        logger.info("request_rejected", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    items = [
        ValidationErrorItem(
            field=".".join(str(loc) for loc in err.get("loc", ())[1:]) or "request",
            code=ValidationErrorCode.INCORRECT_FORMAT,
            reason=err.get("msg", "invalid value"),
        )
        for err in exc.errors()
    ]
    error = ValidationError(items)
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    error = InternalServerError()
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await close_default_swap_service()


def create_app() -> FastAPI:
    """Build the FastAPI application with routes and error handlers."""
    app = FastAPI(
        title="Swap API",
        description="Aggregated token swap quotes with ready-to-sign calldata",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(router, prefix=SWAP_PATH)
    app.add_exception_handler(SwapAPIError, handle_swap_api_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get(HEALTH_CHECK_PATH)
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    """Run the swap API server.

    Configuration is read from the environment, see ``swap_api.config``.
    """
    settings = get_settings()
    configure_logging(settings.log_level, settings.logger_include_timestamp)
    logger.info("server_starting", chain_id=int(settings.chain_id), port=settings.http_port)
    uvicorn.run(app, host=settings.http_host, port=settings.http_port)


if __name__ == "__main__":
    run()
