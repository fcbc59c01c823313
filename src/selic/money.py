"""Exact decimal money type for statutory correction arithmetic.

CRITICAL: Amounts, rates and factors never pass through binary floating point.
Every operation runs inside an explicit MoneyContext (precision and rounding
mode) carried by the operand, so the rounding contract does not depend on
the process-wide decimal context.

Brazilian legal/accounting convention: at least 20 significant digits and
ROUND_HALF_UP, because statutory results are audited to the centavo.
"""

from __future__ import annotations

import decimal
import re
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from selic.config import MoneySettings
from selic.exceptions import DivisionByZero, InvalidAmount

MIN_PRECISION = 20

_NON_NUMERIC = re.compile(r"[^\d.,-]")
_DECIMAL_TEXT = re.compile(r"^-?(\d+\.?\d*|\.\d+)$")
_GROUPED_INTEGER = re.compile(r"^-?\d{1,3}(\.\d{3})+$")
_SWAP_SEPARATORS = str.maketrans(",.", ".,")


@dataclass(frozen=True)
class MoneyContext:
    """Precision and rounding mode applied by every Money operation."""

    precision: int = MIN_PRECISION
    rounding: str = ROUND_HALF_UP

    def __post_init__(self) -> None:
        if self.precision < MIN_PRECISION:
            raise ValueError(
                f"precision must be at least {MIN_PRECISION} significant digits, "
                f"got {self.precision}"
            )

    @classmethod
    def from_settings(cls, settings: MoneySettings) -> MoneyContext:
        return cls(precision=settings.precision, rounding=settings.rounding)

    def decimal_context(self) -> decimal.Context:
        """Build a fresh decimal.Context; never shared or installed globally."""
        return decimal.Context(
            prec=self.precision,
            rounding=self.rounding,
            traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow],
        )

    def money(self, value: Money | Decimal | int | float | str) -> Money:
        """Construct a Money bound to this context."""
        return Money(value, context=self)


DEFAULT_CONTEXT = MoneyContext()


def _brl_to_plain(cleaned: str, text: str) -> str:
    """Rewrite Brazilian notation ("1.234,56") as plain decimal text ("1234.56").

    Dots are only accepted as thousands separators in front of the comma;
    "1,234.56" or "12.34,5" raise instead of being misread.
    """
    integer, comma, fraction = cleaned.partition(",")
    if "." in integer and not _GROUPED_INTEGER.match(integer):
        raise InvalidAmount(f"Misplaced thousands separator: {text!r}")
    return integer.replace(".", "") + ("." + fraction if comma else "")


def _parse_text(text: str) -> Decimal:
    """Read locale-tolerant text such as "R$ 1.234,56", "1.15" or "-10,5".

    Everything except digits, ".", "," and "-" is dropped. When a comma is
    present it is the decimal separator and dots are thousands separators.
    """
    cleaned = _NON_NUMERIC.sub("", text)
    if "," in cleaned:
        cleaned = _brl_to_plain(cleaned, text)
    if not _DECIMAL_TEXT.match(cleaned):
        raise InvalidAmount(f"Not a decimal amount: {text!r}")
    return Decimal(cleaned)


def _to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, str):
        return _parse_text(value)
    if isinstance(value, bool):
        raise InvalidAmount(f"Not a decimal amount: {value!r}")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidAmount(f"Not a finite amount: {value!r}")
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # repr() gives the shortest round-tripping literal, not the binary expansion
        parsed = Decimal(repr(value))
        if not parsed.is_finite():
            raise InvalidAmount(f"Not a finite amount: {value!r}")
        return parsed
    raise InvalidAmount(f"Unsupported amount type: {type(value).__name__}")


class Money:
    """Immutable arbitrary-precision decimal amount.

    Construct from an int, a float (read through its shortest repr), a
    Decimal, locale-tolerant text or another Money. Arithmetic takes Money
    operands only; convert primitives explicitly with ``Money(...)``.
    Results are computed in this value's context.

    Usage:
        principal = Money("R$ 1.000,00")
        corrected = principal * Money("1.0335")
        corrected.to_fixed(2)  # "1033.50"
    """

    __slots__ = ("_value", "_context")

    def __init__(
        self,
        value: Money | Decimal | int | float | str,
        context: MoneyContext | None = None,
    ) -> None:
        if isinstance(value, Money):
            self._value = value._value
            self._context = context or value._context
        else:
            self._value = _to_decimal(value)
            self._context = context or DEFAULT_CONTEXT

    @property
    def context(self) -> MoneyContext:
        return self._context

    def _wrap(self, value: Decimal) -> Money:
        return Money(value, context=self._context)

    # ──────────────────────────────────────────────
    # Arithmetic
    # ──────────────────────────────────────────────

    def add(self, other: Money) -> Money:
        return self._wrap(self._context.decimal_context().add(self._value, other._value))

    def subtract(self, other: Money) -> Money:
        return self._wrap(
            self._context.decimal_context().subtract(self._value, other._value)
        )

    def multiply(self, other: Money) -> Money:
        return self._wrap(
            self._context.decimal_context().multiply(self._value, other._value)
        )

    def divide(self, other: Money) -> Money:
        """Divide by another amount.

        Raises:
            DivisionByZero: If ``other`` is zero.
        """
        if other._value.is_zero():
            raise DivisionByZero(f"Cannot divide {self.to_exact_string()} by zero")
        return self._wrap(self._context.decimal_context().divide(self._value, other._value))

    def pow(self, exponent: Money) -> Money:
        """Raise to ``exponent``; a negative base needs an integral exponent."""
        if self._value.is_zero() and exponent._value < 0:
            raise DivisionByZero("Cannot raise zero to a negative power")
        try:
            result = self._context.decimal_context().power(self._value, exponent._value)
        except (decimal.InvalidOperation, decimal.Overflow) as e:
            raise InvalidAmount(
                f"Cannot raise {self.to_exact_string()} to {exponent.to_exact_string()}"
            ) from e
        return self._wrap(result)

    def sqrt(self) -> Money:
        if self._value < 0:
            raise InvalidAmount(
                f"Square root of negative amount: {self.to_exact_string()}"
            )
        return self._wrap(self._context.decimal_context().sqrt(self._value))

    def abs(self) -> Money:
        return self._wrap(self._context.decimal_context().abs(self._value))

    def negate(self) -> Money:
        return self._wrap(self._context.decimal_context().minus(self._value))

    def __add__(self, other: object) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: object) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, other: object) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.multiply(other)

    def __truediv__(self, other: object) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.divide(other)

    def __pow__(self, exponent: object) -> Money:
        if not isinstance(exponent, Money):
            return NotImplemented
        return self.pow(exponent)

    def __neg__(self) -> Money:
        return self.negate()

    def __abs__(self) -> Money:
        return self.abs()

    # ──────────────────────────────────────────────
    # Comparisons
    # ──────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self._value == other._value

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self._value != other._value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self._value < other._value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self._value <= other._value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self._value > other._value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self._value >= other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def is_zero(self) -> bool:
        return self._value.is_zero()

    # ──────────────────────────────────────────────
    # Conversions
    # ──────────────────────────────────────────────

    def to_number(self) -> float:
        """Lossy float view, for display and JSON consumers only."""
        return float(self._value)

    def to_decimal(self) -> Decimal:
        return self._value

    def to_exact_string(self) -> str:
        return format(self._value, "f")

    def _quantized(self, decimals: int) -> Decimal:
        exponent = Decimal(1).scaleb(-decimals)
        context = self._context.decimal_context()
        # Room for every integer digit plus the requested fraction
        context.prec = max(context.prec, self._value.adjusted() + 1 + decimals)
        return self._value.quantize(exponent, context=context)

    def to_fixed(self, decimals: int = 2) -> str:
        """Render with ``decimals`` places using the context rounding mode."""
        return format(self._quantized(decimals), "f")

    def to_brl(self) -> str:
        """Currency display string, e.g. "R$ 1.234,56" or "-R$ 0,50"."""
        quantized = self._quantized(2)
        grouped = format(abs(quantized), ",f").translate(_SWAP_SEPARATORS)
        sign = "-" if quantized < 0 else ""
        return f"{sign}R$ {grouped}"

    def to_br_number(self) -> str:
        """Brazilian numeric export format, e.g. "1234,56"."""
        return self.to_fixed(2).replace(".", ",")

    def __str__(self) -> str:
        return self.to_fixed(2)

    def __repr__(self) -> str:
        return f"Money('{self.to_exact_string()}')"

    # ──────────────────────────────────────────────
    # Static helpers
    # ──────────────────────────────────────────────

    @staticmethod
    def from_brl(text: str, context: MoneyContext | None = None) -> Money:
        """Parse a BRL-formatted string: "R$ 1.234,56" -> 1234.56.

        Dots are always thousands separators here, so "R$ 1.234" is 1234.
        """
        cleaned = _brl_to_plain(_NON_NUMERIC.sub("", text), text)
        if not _DECIMAL_TEXT.match(cleaned):
            raise InvalidAmount(f"Not a BRL amount: {text!r}")
        return Money(Decimal(cleaned), context=context)

    @staticmethod
    def zero(context: MoneyContext | None = None) -> Money:
        return Money(0, context=context)

    @staticmethod
    def one(context: MoneyContext | None = None) -> Money:
        return Money(1, context=context)

    @staticmethod
    def max(a: Money, b: Money) -> Money:
        return a if a > b else b

    @staticmethod
    def min(a: Money, b: Money) -> Money:
        return a if a < b else b

    @staticmethod
    def sum(values: Sequence[Money], context: MoneyContext | None = None) -> Money:
        total = Money.zero(context)
        for value in values:
            total = total.add(value)
        return total

    @staticmethod
    def average(values: Sequence[Money], context: MoneyContext | None = None) -> Money:
        """Arithmetic mean; an empty sequence averages to zero."""
        if not values:
            return Money.zero(context)
        return Money.sum(values, context).divide(Money(len(values)))
