"""Correction service -- runs one correction request end to end.

Pipeline per request (strictly sequential):
1. Validate dates (order, future, series floor).
2. Adjust start and end to business days known to the series.
3. Fetch records for [adjusted_start + 1 month, adjusted_end - 1 month].
4. Accrue the factor (fetched months + flat final month) and correct the principal.
5. For fines, apply the fine percentage to the corrected principal.

No state survives between requests.
"""

from collections.abc import Callable
from datetime import date

import structlog

from selic.accrual.engine import AccrualEngine
from selic.accrual.fine import FineCalculator
from selic.config import CorrectionSettings
from selic.data.dates import fetch_window
from selic.data.fetcher import SeriesFetcher
from selic.exceptions import NoDataError, ValidationError
from selic.logging import get_logger
from selic.models import CorrectionReport, FineCorrectionReport
from selic.money import Money

logger = get_logger(__name__)


class CorrectionService:
    """Validates input, gathers SELIC records and produces correction reports.

    Args:
        fetcher: Series fetcher (business-day adjustment and record fetch).
        engine: Accrual engine computing the factor and corrected principal.
        fine_calculator: Applies the fine to the corrected principal.
        settings: Accrual policy (series floor).
        series_code: SGS series to correct with (4390 = monthly SELIC).
        today: Clock used for the "no future dates" rule.
    """

    def __init__(
        self,
        fetcher: SeriesFetcher,
        engine: AccrualEngine,
        fine_calculator: FineCalculator,
        settings: CorrectionSettings,
        series_code: int,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._fetcher = fetcher
        self._engine = engine
        self._fine_calculator = fine_calculator
        self._settings = settings
        self._series_code = series_code
        self._today = today

    def validate_period(self, start: date | None, end: date | None) -> None:
        """Reject periods the correction cannot be computed for.

        Raises:
            ValidationError: Missing dates, end not after start, a future
                date, or a date before the series' first publication.
        """
        if start is None or end is None:
            raise ValidationError("Required fields: start_date, end_date")
        if start >= end:
            raise ValidationError("The end date must be after the start date.")

        today = self._today()
        if start > today:
            raise ValidationError("The start date cannot be in the future.")
        if end > today:
            raise ValidationError("The end date cannot be in the future.")

        floor = self._settings.series_floor
        if start < floor:
            raise ValidationError(
                f"The start date cannot be before {floor.strftime('%d/%m/%Y')}, "
                "the first month published by the SELIC series."
            )

    async def correct(
        self,
        principal: Money | None,
        start: date | None,
        end: date | None,
    ) -> CorrectionReport:
        """Correct ``principal`` by SELIC from ``start`` to ``end``.

        Raises:
            ValidationError: Invalid input (see validate_period).
            NoDataError: The series has no record in the fetch window.
            SourceUnavailable: The series could not be fetched.
        """
        if principal is None:
            raise ValidationError("Required field: principal")
        self.validate_period(start, end)

        with structlog.contextvars.bound_contextvars(series_code=self._series_code):
            return await self._correct(principal, start, end)

    async def correct_with_fine(
        self,
        original_value: Money | None,
        start: date | None,
        end: date | None,
        fine_percentage: Money | None,
    ) -> FineCorrectionReport:
        """Correct ``original_value`` by SELIC, then apply the fine on the result."""
        if original_value is None or fine_percentage is None:
            raise ValidationError("Required fields: original_value, fine_percentage")
        self.validate_period(start, end)

        with structlog.contextvars.bound_contextvars(series_code=self._series_code):
            report = await self._correct(original_value, start, end)
            fine = self._fine_calculator.correct_fine(
                report.result.corrected_value, fine_percentage
            )

        return FineCorrectionReport(
            correction=report,
            fine_percentage=fine_percentage,
            fine=fine,
        )

    async def _correct(self, principal: Money, start: date, end: date) -> CorrectionReport:
        start_adjustment = await self._fetcher.adjust_to_business_day(start, self._series_code)
        end_adjustment = await self._fetcher.adjust_to_business_day(end, self._series_code)
        period_start = start_adjustment.adjusted_date
        period_end = end_adjustment.adjusted_date

        fetch_start, fetch_end = fetch_window(period_start, period_end)
        logger.info(
            "correction_period",
            period_start=period_start.isoformat(),
            period_end=period_end.isoformat(),
            fetch_start=fetch_start.isoformat(),
            fetch_end=fetch_end.isoformat(),
        )

        records = await self._fetcher.fetch_series(self._series_code, fetch_start, fetch_end)
        if not records:
            raise NoDataError("No SELIC data found for the requested period.")

        factor = self._engine.compute_factor(records, period_start, period_end)
        result = self._engine.apply_correction(principal, factor)

        return CorrectionReport(
            original_value=principal,
            factor=factor,
            result=result,
            start=start_adjustment,
            end=end_adjustment,
            fetch_start=fetch_start,
            fetch_end=fetch_end,
            rates=[*records, self._engine.final_month_record(period_end)],
        )
