"""Banco Central SGS client implementation via httpx async.

Endpoint: GET {base_url}/bcdata.sgs.{code}/dados?formato=json&dataInicial=DD/MM/YYYY&dataFinal=DD/MM/YYYY
Response: JSON array of {"data": "DD/MM/YYYY", "valor": "1.15"}.

The SGS API sometimes answers with an XML error document and a 200 status;
that is treated as a failed fetch, like any non-2xx or non-JSON answer.
"""

from datetime import date

import httpx

from selic.config import SourceSettings
from selic.exceptions import InvalidAmount, SourceUnavailable
from selic.logging import get_logger
from selic.models import RateRecord, to_wire_date
from selic.source.client import RateSeriesSource

logger = get_logger(__name__)


class BcbSgsClient(RateSeriesSource):
    """Concrete SGS client using a shared httpx.AsyncClient."""

    def __init__(
        self,
        settings: SourceSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._http = http_client or httpx.AsyncClient(timeout=settings.timeout)

    def series_url(self, series_code: int) -> str:
        return f"{self._settings.base_url.rstrip('/')}/bcdata.sgs.{series_code}/dados"

    async def fetch_records(
        self,
        series_code: int,
        start: date,
        end: date,
    ) -> list[RateRecord]:
        """Fetch one date range from SGS and parse it into RateRecords."""
        params = {
            "formato": "json",
            "dataInicial": to_wire_date(start),
            "dataFinal": to_wire_date(end),
        }
        logger.debug(
            "sgs_request",
            series_code=series_code,
            start=params["dataInicial"],
            end=params["dataFinal"],
        )

        try:
            response = await self._http.get(self.series_url(series_code), params=params)
        except httpx.HTTPError as e:
            raise SourceUnavailable(f"SGS request failed: {e}") from e

        if not response.is_success:
            raise SourceUnavailable(
                f"SGS returned HTTP {response.status_code} for series {series_code}"
            )

        if response.text.lstrip().startswith("<?xml"):
            raise SourceUnavailable("SGS returned XML instead of JSON")

        try:
            payload = response.json()
        except ValueError as e:
            raise SourceUnavailable(f"SGS returned invalid JSON: {e}") from e

        if not isinstance(payload, list):
            raise SourceUnavailable("SGS payload is not a list of records")

        try:
            records = [RateRecord.from_wire(item) for item in payload]
        except (KeyError, TypeError, ValueError, InvalidAmount) as e:
            raise SourceUnavailable(f"SGS returned a malformed record: {e}") from e

        logger.debug("sgs_response", series_code=series_code, records=len(records))
        return records

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self._http.aclose()
        logger.info("sgs_client_closed")
