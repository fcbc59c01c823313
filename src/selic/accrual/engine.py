"""SELIC accrual engine: monthly rate records -> correction factor -> corrected principal.

All calculations use Money (exact decimal) arithmetic -- no float conversions anywhere.

Accrual methodology (PGE/SP):
  - Simple accrual: factor = 1 + sum(monthly_pct / 100). Monthly factors are
    NOT compounded.
  - The final month of the period is never fetched; it is charged at a flat
    final_month_rate (1%) from CorrectionSettings.
  - The month of the triggering event never accrues. Callers fetch records
    from period_start + 1 month to period_end - 1 month.
"""

from collections.abc import Sequence
from datetime import date

from selic.config import CorrectionSettings
from selic.logging import get_logger
from selic.models import CorrectionResult, RateRecord
from selic.money import DEFAULT_CONTEXT, Money, MoneyContext

logger = get_logger(__name__)


class AccrualEngine:
    """Turns SELIC rate records into a correction factor and applies it.

    Args:
        settings: Accrual policy (final-month rate).
        context: Decimal context for every Money the engine creates.
    """

    def __init__(
        self,
        settings: CorrectionSettings,
        context: MoneyContext = DEFAULT_CONTEXT,
    ) -> None:
        self._settings = settings
        self._context = context
        self._hundred = Money(100, context=context)

    def _percent(self, value: Money) -> Money:
        return value.divide(self._hundred)

    @property
    def final_month_rate(self) -> Money:
        """Flat charge for the final month, as a fraction (1% -> 0.01)."""
        return self._percent(Money(self._settings.final_month_rate, context=self._context))

    def compute_factor(
        self,
        records: Sequence[RateRecord],
        period_start: date | None,
        period_end: date | None,
    ) -> Money:
        """Accumulate monthly percentages into a correction factor.

        Records are summed in sequence order. When both period bounds are
        known the final-month rate is added after the last record, so an
        empty record list over a real period still yields 1.01.

        Args:
            records: Rate records already restricted to the fetch window.
            period_start: Business-day adjusted start of the period.
            period_end: Business-day adjusted end of the period.

        Returns:
            Correction factor (>= 1 for non-negative rates).
        """
        accumulated = Money.zero(self._context)

        for record in records:
            accumulated = accumulated.add(self._percent(record.rate(self._context)))
            logger.debug(
                "selic_rate_accumulated",
                date=record.date.isoformat(),
                rate=record.percentage,
                accumulated_pct=accumulated.multiply(self._hundred).to_fixed(6),
            )

        if period_start is not None and period_end is not None:
            accumulated = accumulated.add(self.final_month_rate)
            logger.debug(
                "selic_final_month_added",
                month=period_end.strftime("%m/%Y"),
                rate=str(self._settings.final_month_rate),
            )

        factor = Money.one(self._context).add(accumulated)
        logger.info(
            "selic_factor_computed",
            records=len(records),
            period_start=period_start.isoformat() if period_start else None,
            period_end=period_end.isoformat() if period_end else None,
            factor=factor.to_fixed(8),
            accumulated_pct=accumulated.multiply(self._hundred).to_fixed(6),
        )
        return factor

    def apply_correction(self, principal: Money, factor: Money) -> CorrectionResult:
        """Apply a correction factor to a principal.

        corrected = principal * factor; correction = corrected - principal;
        percentage = (factor - 1) * 100. No validation: zero or negative
        principals are the caller's concern.
        """
        corrected_value = principal.multiply(factor)
        correction = corrected_value.subtract(principal)
        percentage = factor.subtract(Money.one(self._context)).multiply(self._hundred)

        logger.info(
            "selic_correction_applied",
            original_value=principal.to_brl(),
            factor=factor.to_fixed(8),
            corrected_value=corrected_value.to_brl(),
            correction=correction.to_brl(),
            percentage=percentage.to_fixed(6),
        )
        return CorrectionResult(
            corrected_value=corrected_value,
            correction=correction,
            percentage=percentage,
        )

    def correct_principal(
        self,
        principal: Money,
        records: Sequence[RateRecord],
        period_start: date | None,
        period_end: date | None,
    ) -> CorrectionResult:
        """Compute the factor for ``records`` and apply it to ``principal``."""
        factor = self.compute_factor(records, period_start, period_end)
        return self.apply_correction(principal, factor)

    def final_month_record(self, period_end: date) -> RateRecord:
        """Synthetic record for the flat-rate final month (first day of that month)."""
        return RateRecord(
            date=period_end.replace(day=1),
            percentage=Money(self._settings.final_month_rate).to_fixed(2),
        )

    # ──────────────────────────────────────────────
    # Comparison helpers (not used by the correction pipeline)
    # ──────────────────────────────────────────────

    def compute_compound_factor(self, records: Sequence[RateRecord]) -> Money:
        """Compound factor prod(1 + pct/100), for comparison with simple accrual."""
        one = Money.one(self._context)
        factor = one
        for record in records:
            factor = factor.multiply(one.add(self._percent(record.rate(self._context))))
        logger.debug(
            "selic_compound_factor_computed",
            records=len(records),
            factor=factor.to_fixed(8),
        )
        return factor

    def compound_interest(self, principal: Money, rate: Money, periods: int) -> Money:
        """principal * (1 + rate) ** periods, with ``rate`` as a fraction."""
        growth = Money.one(self._context).add(rate).pow(Money(periods, context=self._context))
        return principal.multiply(growth)
