"""Value objects flowing through the correction pipeline.

CRITICAL: All monetary values use Money. Never use float for amounts, rates or factors.
Rate records keep the percentage exactly as published by the series.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from selic.money import Money, MoneyContext

WIRE_DATE_FORMAT = "%d/%m/%Y"


def to_wire_date(value: date) -> str:
    """Format a date the way the SGS API expects it (DD/MM/YYYY)."""
    return value.strftime(WIRE_DATE_FORMAT)


def from_wire_date(value: str) -> date:
    return datetime.strptime(value, WIRE_DATE_FORMAT).date()


@dataclass(frozen=True)
class RateRecord:
    """One published SELIC percentage (monthly series: first day of the month)."""

    date: date
    percentage: str  # decimal string as published, e.g. "1.15"

    @classmethod
    def from_wire(cls, payload: dict) -> RateRecord:
        """Build from an SGS item: {"data": "01/10/2023", "valor": "1.15"}.

        Raises:
            KeyError: A field is missing.
            ValueError: The date is not DD/MM/YYYY, or ``valor`` is not a
                decimal amount (InvalidAmount).
        """
        valor = payload["valor"]
        Money(valor)  # rejects null, empty and non-numeric values
        return cls(date=from_wire_date(payload["data"]), percentage=str(valor))

    def to_wire(self) -> dict[str, str]:
        return {"data": to_wire_date(self.date), "valor": self.percentage}

    def rate(self, context: MoneyContext | None = None) -> Money:
        """Percentage as a Money value (1.15 -> Money("1.15"))."""
        return Money(self.percentage, context=context)


@dataclass(frozen=True)
class DateAdjustment:
    """Result of snapping a date to the next day the series publishes."""

    original_date: date
    adjusted_date: date
    was_adjusted: bool


@dataclass(frozen=True)
class CorrectionResult:
    """Principal corrected by a factor. Derived from the principal and factor only."""

    corrected_value: Money
    correction: Money  # corrected_value - principal
    percentage: Money  # (factor - 1) * 100


@dataclass(frozen=True)
class FineResult:
    """Fine applied to an already-corrected base."""

    fine_value: Money
    total_value: Money  # base + fine_value


@dataclass
class CorrectionReport:
    """Full result of a principal correction request.

    Monetary fields keep full precision; to_dict() renders them with two
    decimals (ROUND_HALF_UP) at the presentation boundary.
    """

    original_value: Money
    factor: Money
    result: CorrectionResult
    start: DateAdjustment
    end: DateAdjustment
    fetch_start: date
    fetch_end: date
    rates: list[RateRecord] = field(default_factory=list)

    @property
    def periods(self) -> int:
        return len(self.rates)

    def to_dict(self) -> dict:
        return {
            "original_value": self.original_value.to_fixed(2),
            "corrected_value": self.result.corrected_value.to_fixed(2),
            "correction": self.result.correction.to_fixed(2),
            "correction_factor": self.factor.to_fixed(8),
            "correction_percentage": self.result.percentage.to_fixed(6),
            "periods": self.periods,
            "rates": [rate.to_wire() for rate in self.rates],
            "original_start_date": self.start.original_date.isoformat(),
            "adjusted_start_date": self.start.adjusted_date.isoformat(),
            "start_date_was_adjusted": self.start.was_adjusted,
            "original_end_date": self.end.original_date.isoformat(),
            "adjusted_end_date": self.end.adjusted_date.isoformat(),
            "end_date_was_adjusted": self.end.was_adjusted,
            "fetch_start_date": self.fetch_start.isoformat(),
            "fetch_end_date": self.fetch_end.isoformat(),
        }


@dataclass
class FineCorrectionReport:
    """Principal correction followed by a fine on the corrected base."""

    correction: CorrectionReport
    fine_percentage: Money
    fine: FineResult

    @property
    def total_increase(self) -> Money:
        return self.fine.total_value - self.correction.original_value

    def to_dict(self) -> dict:
        payload = self.correction.to_dict()
        payload.update(
            {
                "fine_percentage": self.fine_percentage.to_fixed(2),
                "fine_value": self.fine.fine_value.to_fixed(2),
                "total_value": self.fine.total_value.to_fixed(2),
                "total_increase": self.total_increase.to_fixed(2),
            }
        )
        return payload
