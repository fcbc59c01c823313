"""JSON API endpoints: SELIC correction of a principal and of a fine."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from selic.api.schemas import Amount, CorrectionRequest, FineCorrectionRequest
from selic.logging import get_logger
from selic.money import Money, MoneyContext
from selic.service import CorrectionService

log = get_logger(__name__)

router = APIRouter()


def _to_money(value: Amount | None, context: MoneyContext) -> Money | None:
    """Explicit conversion of a raw request amount; None stays None for validation."""
    if value is None:
        return None
    return Money(value, context=context)


def _service(request: Request) -> CorrectionService:
    return request.app.state.service


@router.get("/health")
async def health() -> JSONResponse:
    return JSONResponse(content={"status": "ok"})


@router.post("/selic")
async def correct_selic(body: CorrectionRequest, request: Request) -> JSONResponse:
    """Correct a principal by the monthly SELIC between two dates."""
    context = request.app.state.money_context
    report = await _service(request).correct(
        principal=_to_money(body.principal, context),
        start=body.start_date,
        end=body.end_date,
    )
    log.info(
        "selic_correction_served",
        corrected_value=report.result.corrected_value.to_fixed(2),
        periods=report.periods,
    )
    return JSONResponse(content=report.to_dict())


@router.post("/fine-correction")
async def correct_fine(body: FineCorrectionRequest, request: Request) -> JSONResponse:
    """Correct a fine's base value by SELIC, then apply the fine percentage."""
    context = request.app.state.money_context
    report = await _service(request).correct_with_fine(
        original_value=_to_money(body.original_value, context),
        start=body.start_date,
        end=body.end_date,
        fine_percentage=_to_money(body.fine_percentage, context),
    )
    log.info(
        "fine_correction_served",
        total_value=report.fine.total_value.to_fixed(2),
        periods=report.correction.periods,
    )
    return JSONResponse(content=report.to_dict())
