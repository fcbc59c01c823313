"""Tests for SeriesFetcher: business-day adjustment, pagination and retry.

All tests use an in-memory FakeSource to avoid real API calls.
"""

from datetime import date, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from selic.config import SourceSettings
from selic.data.fetcher import SeriesFetcher
from selic.exceptions import SourceUnavailable
from selic.models import RateRecord

from conftest import FakeSource, monthly


def weekdays(start: date, end: date, percentage: str = "0.043739") -> list[RateRecord]:
    """Daily records on weekdays only, like the daily SELIC series."""
    records = []
    day = start
    while day <= end:
        if day.weekday() < 5:
            records.append(RateRecord(date=day, percentage=percentage))
        day += timedelta(days=1)
    return records


# ---------------------------------------------------------------------------
# Business-day adjustment
# ---------------------------------------------------------------------------


class TestAdjustToBusinessDay:
    @pytest.mark.asyncio
    async def test_saturday_moves_to_monday(self, source_settings: SourceSettings) -> None:
        source = FakeSource(weekdays(date(2024, 1, 1), date(2024, 1, 31)))
        fetcher = SeriesFetcher(source, source_settings)

        adjustment = await fetcher.adjust_to_business_day(date(2024, 1, 6), 11)

        assert adjustment.original_date == date(2024, 1, 6)
        assert adjustment.adjusted_date == date(2024, 1, 8)
        assert adjustment.was_adjusted is True

    @pytest.mark.asyncio
    async def test_business_day_is_unchanged(self, source_settings: SourceSettings) -> None:
        source = FakeSource(weekdays(date(2024, 1, 1), date(2024, 1, 31)))
        fetcher = SeriesFetcher(source, source_settings)

        adjustment = await fetcher.adjust_to_business_day(date(2024, 1, 10), 11)

        assert adjustment.adjusted_date == date(2024, 1, 10)
        assert adjustment.was_adjusted is False

    @pytest.mark.asyncio
    async def test_queries_seven_day_lookahead(self, source_settings: SourceSettings) -> None:
        source = FakeSource([])
        fetcher = SeriesFetcher(source, source_settings)

        await fetcher.adjust_to_business_day(date(2024, 1, 6))

        assert source.calls == [(4390, date(2024, 1, 6), date(2024, 1, 13))]

    @pytest.mark.asyncio
    async def test_no_record_keeps_original(self, source_settings: SourceSettings) -> None:
        fetcher = SeriesFetcher(FakeSource([]), source_settings)

        adjustment = await fetcher.adjust_to_business_day(date(2023, 9, 15))

        assert adjustment.adjusted_date == date(2023, 9, 15)
        assert adjustment.was_adjusted is False

    @pytest.mark.asyncio
    async def test_source_failure_falls_back(self, source_settings: SourceSettings) -> None:
        """Adjustment failure is not an error: the requested date is kept."""
        source = FakeSource(weekdays(date(2024, 1, 1), date(2024, 1, 31)), failures=99)
        fetcher = SeriesFetcher(source, source_settings)

        adjustment = await fetcher.adjust_to_business_day(date(2024, 1, 6))

        assert adjustment.adjusted_date == date(2024, 1, 6)
        assert adjustment.was_adjusted is False
        assert len(source.calls) == source_settings.max_retries


# ---------------------------------------------------------------------------
# Series fetch
# ---------------------------------------------------------------------------


class TestFetchSeries:
    @pytest.mark.asyncio
    async def test_short_span_single_request(self, source_settings: SourceSettings) -> None:
        source = FakeSource(monthly((2023, 10, "1.15"), (2023, 11, "1.20"), (2023, 12, "0.89")))
        fetcher = SeriesFetcher(source, source_settings)

        records = await fetcher.fetch_series(4390, date(2023, 10, 1), date(2023, 11, 1))

        assert [r.percentage for r in records] == ["1.15", "1.20"]
        assert source.calls == [(4390, date(2023, 10, 1), date(2023, 11, 1))]

    @pytest.mark.asyncio
    async def test_inverted_range_makes_no_request(self, source_settings: SourceSettings) -> None:
        source = FakeSource(monthly((2023, 10, "1.15")))
        fetcher = SeriesFetcher(source, source_settings)

        records = await fetcher.fetch_series(4390, date(2023, 11, 15), date(2023, 10, 10))

        assert records == []
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_long_span_paginates_in_order(self, source_settings: SourceSettings) -> None:
        history = monthly(*[(y, m, "0.80") for y in range(2000, 2025) for m in range(1, 13)])
        source = FakeSource(history)
        fetcher = SeriesFetcher(source, source_settings)

        records = await fetcher.fetch_series(4390, date(2000, 1, 1), date(2024, 12, 1))

        assert source.calls == [
            (4390, date(2000, 1, 1), date(2010, 1, 1)),
            (4390, date(2010, 1, 2), date(2020, 1, 2)),
            (4390, date(2020, 1, 3), date(2024, 12, 1)),
        ]
        assert len(records) == 300
        assert records[0].date == date(2000, 1, 1)
        assert records[-1].date == date(2024, 12, 1)

    @pytest.mark.asyncio
    async def test_last_day_requested_when_block_stops_one_day_short(
        self, source_settings: SourceSettings
    ) -> None:
        """The block after [2000-01-01, 2010-01-01] is the single day 2010-01-02."""
        source = FakeSource(
            [
                RateRecord(date=date(2000, 1, 1), percentage="1.45"),
                RateRecord(date=date(2010, 1, 2), percentage="0.66"),
            ]
        )
        fetcher = SeriesFetcher(source, source_settings)

        records = await fetcher.fetch_series(11, date(2000, 1, 1), date(2010, 1, 2))

        assert source.calls == [
            (11, date(2000, 1, 1), date(2010, 1, 1)),
            (11, date(2010, 1, 2), date(2010, 1, 2)),
        ]
        assert [r.date for r in records] == [date(2000, 1, 1), date(2010, 1, 2)]

    @pytest.mark.asyncio
    async def test_paginated_records_deduplicated_and_sorted(
        self, source_settings: SourceSettings
    ) -> None:
        """Every block answering the same overlapping payload yields one record per date."""
        overlapping = monthly((2015, 3, "1.04"), (2009, 7, "0.79"), (2015, 3, "1.05"))
        source = AsyncMock()
        source.fetch_records = AsyncMock(return_value=overlapping)
        fetcher = SeriesFetcher(source, source_settings)

        records = await fetcher.fetch_series(4390, date(2000, 1, 1), date(2024, 12, 1))

        assert source.fetch_records.await_count == 3
        assert [(r.date, r.percentage) for r in records] == [
            (date(2009, 7, 1), "0.79"),
            (date(2015, 3, 1), "1.05"),
        ]

    @pytest.mark.asyncio
    async def test_nine_year_span_is_one_request(self, source_settings: SourceSettings) -> None:
        source = FakeSource([])
        fetcher = SeriesFetcher(source, source_settings)

        await fetcher.fetch_series(4390, date(2010, 1, 1), date(2019, 1, 1))

        assert len(source.calls) == 1


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------


class TestRetry:
    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(
        self, source_settings: SourceSettings
    ) -> None:
        source = FakeSource(monthly((2023, 10, "1.15")), failures=2)
        fetcher = SeriesFetcher(source, source_settings)

        records = await fetcher.fetch_series(4390, date(2023, 10, 1), date(2023, 11, 1))

        assert [r.percentage for r in records] == ["1.15"]
        assert len(source.calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, source_settings: SourceSettings) -> None:
        source = FakeSource(monthly((2023, 10, "1.15")), failures=3)
        fetcher = SeriesFetcher(source, source_settings)

        with pytest.raises(SourceUnavailable, match="after 3 attempts"):
            await fetcher.fetch_series(4390, date(2023, 10, 1), date(2023, 11, 1))
        assert len(source.calls) == 3

    @pytest.mark.asyncio
    async def test_linear_backoff(self) -> None:
        settings = SourceSettings(retry_base_delay=1.0, max_retries=3)
        fetcher = SeriesFetcher(FakeSource([], failures=3), settings)

        with patch("selic.data.fetcher.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(SourceUnavailable):
                await fetcher.fetch_series(4390, date(2023, 10, 1), date(2023, 11, 1))

        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]
