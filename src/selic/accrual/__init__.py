"""SELIC accrual core -- correction factor, principal correction and fines."""

from selic.accrual.engine import AccrualEngine
from selic.accrual.fine import FineCalculator

__all__ = ["AccrualEngine", "FineCalculator"]
