"""Fine (multa) computation on a SELIC-corrected base.

Ordering rule: the principal is corrected first, and the fine percentage is
applied to the corrected value. Applying the fine before correction gives a
different total whenever the factor is not 1.
"""

from selic.logging import get_logger
from selic.models import FineResult
from selic.money import DEFAULT_CONTEXT, Money, MoneyContext

logger = get_logger(__name__)


class FineCalculator:
    """Computes fine value and grand total from a corrected base."""

    def __init__(self, context: MoneyContext = DEFAULT_CONTEXT) -> None:
        self._context = context
        self._hundred = Money(100, context=context)

    def compute_fine(self, corrected_base: Money, fine_percentage: Money) -> FineResult:
        """fine = base * (pct / 100); total = base + fine.

        Args:
            corrected_base: Principal already corrected by the SELIC factor.
            fine_percentage: Fine as a percentage (20 means 20%).

        Returns:
            FineResult with full-precision fine and total values.
        """
        fine_value = corrected_base.multiply(fine_percentage.divide(self._hundred))
        total_value = corrected_base.add(fine_value)
        return FineResult(fine_value=fine_value, total_value=total_value)

    def correct_fine(self, corrected_base: Money, fine_percentage: Money) -> FineResult:
        """Entry point used by the correction service; logs the breakdown."""
        result = self.compute_fine(corrected_base, fine_percentage)
        logger.info(
            "fine_computed",
            corrected_base=corrected_base.to_brl(),
            fine_percentage=fine_percentage.to_fixed(2),
            fine_value=result.fine_value.to_brl(),
            total_value=result.total_value.to_brl(),
        )
        return result
