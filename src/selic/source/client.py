"""Abstract rate-series source interface.

The correction pipeline depends only on this contract: given a series code
and a date range, return the published records in that range. Transport
details stay in the concrete implementation.
"""

from abc import ABC, abstractmethod
from datetime import date

from selic.models import RateRecord


class RateSeriesSource(ABC):
    """Abstract base class for time-series rate sources."""

    @abstractmethod
    async def fetch_records(
        self,
        series_code: int,
        start: date,
        end: date,
    ) -> list[RateRecord]:
        """Fetch published records with start <= date <= end, in source order.

        Performs exactly one request. Retry and pagination are NOT handled
        here -- callers are responsible for both.

        Raises:
            SourceUnavailable: On transport errors, non-2xx responses or a
                payload that is not a JSON array of records.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
        ...
