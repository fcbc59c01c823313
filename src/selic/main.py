"""Entry point for the SELIC correction API.

Wires all components together and serves the FastAPI app with uvicorn.
The SGS client is closed through the FastAPI lifespan on shutdown.

Component wiring order (in build_components):
1. AppSettings (configuration)
2. MoneyContext (precision and rounding for every amount)
3. BcbSgsClient (rate-series source)
4. SeriesFetcher (business-day adjustment, pagination, retry)
5. AccrualEngine and FineCalculator (arithmetic core)
6. CorrectionService (per-request orchestration)
"""

from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from selic.accrual.engine import AccrualEngine
from selic.accrual.fine import FineCalculator
from selic.api.app import create_app
from selic.config import AppSettings
from selic.data.fetcher import SeriesFetcher
from selic.logging import get_logger, setup_logging
from selic.money import MoneyContext
from selic.service import CorrectionService
from selic.source.bcb_client import BcbSgsClient
from selic.source.client import RateSeriesSource


def build_components(
    settings: AppSettings,
    source: RateSeriesSource | None = None,
) -> dict[str, Any]:
    """Build the dependency graph from settings.

    Args:
        settings: Application-wide settings.
        source: Optional rate source; defaults to the SGS client.

    Returns:
        Dict mapping component names to instances.
    """
    money_context = MoneyContext.from_settings(settings.money)
    source = source or BcbSgsClient(settings.source)
    fetcher = SeriesFetcher(source, settings.source)
    engine = AccrualEngine(settings.correction, money_context)
    fine_calculator = FineCalculator(money_context)
    service = CorrectionService(
        fetcher=fetcher,
        engine=engine,
        fine_calculator=fine_calculator,
        settings=settings.correction,
        series_code=settings.source.series_code,
    )
    return {
        "money_context": money_context,
        "source": source,
        "fetcher": fetcher,
        "engine": engine,
        "fine_calculator": fine_calculator,
        "service": service,
    }


def build_app(settings: AppSettings) -> FastAPI:
    """Create the API with a lifespan that closes the rate source."""
    logger = get_logger("selic.main")
    components = build_components(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "api_starting",
            series_code=settings.source.series_code,
            precision=components["money_context"].precision,
            rounding=components["money_context"].rounding,
        )
        yield
        await components["source"].close()
        logger.info("api_stopped")

    return create_app(
        components["service"],
        money_context=components["money_context"],
        lifespan=lifespan,
    )


def main() -> None:
    """Load settings, configure logging and serve the API."""
    settings = AppSettings()
    setup_logging(settings.log_level)
    logger = get_logger("selic.main")

    if not settings.api.enabled:
        logger.warning("api_disabled", note="Set API_ENABLED=true to serve requests")
        return

    app = build_app(settings)
    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,  # keep structlog's handler
    )


if __name__ == "__main__":
    main()
