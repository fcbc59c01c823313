"""Rate-series fetch pipeline: business-day adjustment, pagination and retry.

Orchestrates requests against a RateSeriesSource for one correction request.

Implementation notes:
- SGS rejects ranges longer than 10 years, so longer spans are split into
  consecutive blocks requested strictly in order (never concurrently).
- Blocks share their boundary neighbourhood; records are deduplicated by
  date (later block wins) and returned in ascending date order.
- Every request is retried with LINEAR backoff (1s, 2s, ...). Exhausted
  retries raise SourceUnavailable; there is no cached or partial fallback.
- Business-day adjustment is the one documented fallback: when the lookup
  fails the requested date is kept and reported as not adjusted.
"""

import asyncio
from datetime import date, timedelta

from selic.config import SourceSettings
from selic.data.dates import add_years, span_in_years
from selic.exceptions import SourceUnavailable
from selic.logging import get_logger
from selic.models import DateAdjustment, RateRecord
from selic.source.client import RateSeriesSource

logger = get_logger(__name__)


class SeriesFetcher:
    """Fetches SELIC records and business-day adjustments from a rate source.

    Usage:
        fetcher = SeriesFetcher(source, settings)
        adjustment = await fetcher.adjust_to_business_day(date(2024, 1, 6))
        records = await fetcher.fetch_series(4390, date(2010, 2, 1), date(2024, 5, 1))
    """

    def __init__(self, source: RateSeriesSource, settings: SourceSettings) -> None:
        self._source = source
        self._settings = settings

    # ──────────────────────────────────────────────
    # Public methods
    # ──────────────────────────────────────────────

    async def adjust_to_business_day(
        self,
        target: date,
        series_code: int | None = None,
    ) -> DateAdjustment:
        """Snap ``target`` to the first date on/after it that the series publishes.

        Looks ahead business_day_lookahead_days (7) days. If the source has
        no record in that range, or keeps failing, the target is returned
        unchanged with was_adjusted=False.
        """
        code = series_code or self._settings.series_code
        lookahead_end = target + timedelta(days=self._settings.business_day_lookahead_days)

        try:
            records = await self._fetch_with_retry(code, target, lookahead_end)
        except SourceUnavailable as e:
            logger.warning(
                "business_day_lookup_failed",
                series_code=code,
                target=target.isoformat(),
                error=str(e),
            )
            return DateAdjustment(original_date=target, adjusted_date=target, was_adjusted=False)

        if not records:
            logger.info("business_day_not_found", series_code=code, target=target.isoformat())
            return DateAdjustment(original_date=target, adjusted_date=target, was_adjusted=False)

        adjusted = records[0].date
        logger.info(
            "business_day_adjusted",
            series_code=code,
            target=target.isoformat(),
            adjusted=adjusted.isoformat(),
        )
        return DateAdjustment(
            original_date=target,
            adjusted_date=adjusted,
            was_adjusted=adjusted != target,
        )

    async def fetch_series(
        self,
        series_code: int,
        start: date,
        end: date,
    ) -> list[RateRecord]:
        """Fetch every record in [start, end], paginating past the window limit.

        Returns:
            Records in ascending date order, one per date. An inverted range
            (start after end) yields an empty list without any request.
        """
        if start > end:
            logger.info(
                "fetch_window_empty",
                series_code=series_code,
                start=start.isoformat(),
                end=end.isoformat(),
            )
            return []

        span = span_in_years(start, end)
        if span <= self._settings.window_years:
            records = await self._fetch_with_retry(series_code, start, end)
            return _unique_by_date(records)

        logger.info(
            "fetch_paginating",
            series_code=series_code,
            span_years=round(span, 1),
            window_years=self._settings.window_years,
        )
        collected: list[RateRecord] = []
        blocks = 0
        current = start

        while current <= end:
            block_end = min(add_years(current, self._settings.window_years), end)
            logger.debug(
                "fetch_block",
                series_code=series_code,
                start=current.isoformat(),
                end=block_end.isoformat(),
            )
            collected.extend(await self._fetch_with_retry(series_code, current, block_end))
            blocks += 1
            current = block_end + timedelta(days=1)

        records = _unique_by_date(collected)
        logger.info(
            "fetch_paginated_complete",
            series_code=series_code,
            blocks=blocks,
            records=len(records),
        )
        return records

    # ──────────────────────────────────────────────
    # Retry wrapper
    # ──────────────────────────────────────────────

    async def _fetch_with_retry(
        self,
        series_code: int,
        start: date,
        end: date,
    ) -> list[RateRecord]:
        """Call the source with linear backoff retry.

        Retries up to max_retries attempts with delays base, 2*base, ...
        Raises SourceUnavailable once the last attempt fails.
        """
        max_retries = self._settings.max_retries
        base_delay = self._settings.retry_base_delay

        for attempt in range(1, max_retries + 1):
            try:
                return await self._source.fetch_records(series_code, start, end)
            except SourceUnavailable as e:
                if attempt == max_retries:
                    logger.error(
                        "fetch_failed_permanently",
                        series_code=series_code,
                        error=str(e),
                        attempts=max_retries,
                    )
                    raise SourceUnavailable(
                        f"Rate source unavailable after {max_retries} attempts: {e}"
                    ) from e

                delay = base_delay * attempt
                logger.warning(
                    "fetch_retry",
                    attempt=attempt,
                    max_retries=max_retries,
                    delay=delay,
                    error=str(e),
                )
                await asyncio.sleep(delay)

        return []  # Unreachable when max_retries >= 1


def _unique_by_date(records: list[RateRecord]) -> list[RateRecord]:
    by_date = {record.date: record for record in records}
    return [by_date[day] for day in sorted(by_date)]
