"""FastAPI application factory for the correction API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from selic.api import routes
from selic.exceptions import (
    InvalidAmount,
    NoDataError,
    SelicError,
    SourceUnavailable,
    ValidationError,
)
from selic.logging import get_logger
from selic.money import DEFAULT_CONTEXT, MoneyContext
from selic.service import CorrectionService

log = get_logger(__name__)

# Most specific first; anything else in the family is a 500.
_STATUS_BY_ERROR: list[tuple[type[SelicError], int]] = [
    (ValidationError, 400),
    (InvalidAmount, 400),
    (NoDataError, 404),
    (SourceUnavailable, 502),
]


def _status_for(error: SelicError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


async def _selic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status = _status_for(exc)  # type: ignore[arg-type]
    if status >= 500:
        log.error("correction_failed", path=request.url.path, error=str(exc), status=status)
    else:
        log.info("correction_rejected", path=request.url.path, error=str(exc), status=status)
    return JSONResponse(status_code=status, content={"error": str(exc)})


async def _request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    fields = sorted({".".join(str(part) for part in e["loc"][1:]) for e in errors})
    message = f"Invalid fields: {', '.join(fields)}" if fields else "Invalid request body"
    log.info("request_rejected", path=request.url.path, fields=fields)
    return JSONResponse(status_code=400, content={"error": message})


def create_app(
    service: CorrectionService,
    money_context: MoneyContext = DEFAULT_CONTEXT,
    lifespan: Any = None,
) -> FastAPI:
    """Create and configure the correction API.

    Args:
        service: Correction service shared by all requests (stateless).
        money_context: Decimal context used to read request amounts.
        lifespan: Optional async context manager for startup/shutdown.
                  Used by main.py to close the SGS client.

    Returns:
        Configured FastAPI application with routes under /api.
    """
    app = FastAPI(
        title="SELIC Monetary Correction",
        lifespan=lifespan,
    )

    app.state.service = service
    app.state.money_context = money_context

    app.add_exception_handler(SelicError, _selic_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    app.include_router(routes.router, prefix="/api")

    return app
