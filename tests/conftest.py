"""Shared test fixtures for the SELIC correction service."""

from datetime import date

import pytest

from selic.accrual.engine import AccrualEngine
from selic.accrual.fine import FineCalculator
from selic.config import AppSettings, CorrectionSettings, SourceSettings
from selic.data.fetcher import SeriesFetcher
from selic.exceptions import SourceUnavailable
from selic.models import RateRecord
from selic.service import CorrectionService
from selic.source.client import RateSeriesSource

TODAY = date(2024, 6, 1)


def monthly(*entries: tuple[int, int, str]) -> list[RateRecord]:
    """Build monthly records from (year, month, percentage) tuples."""
    return [RateRecord(date=date(y, m, 1), percentage=pct) for y, m, pct in entries]


# Monthly SELIC (series 4390) around the reference scenario
SAMPLE_RECORDS = monthly(
    (2023, 9, "0.97"),
    (2023, 10, "1.15"),
    (2023, 11, "1.20"),
    (2023, 12, "0.89"),
)


class FakeSource(RateSeriesSource):
    """In-memory rate source that records every call.

    Fails the first ``failures`` calls with SourceUnavailable.
    """

    def __init__(self, records: list[RateRecord] | None = None, failures: int = 0) -> None:
        self.records = sorted(records or [], key=lambda r: r.date)
        self.failures = failures
        self.calls: list[tuple[int, date, date]] = []
        self.closed = False

    async def fetch_records(self, series_code: int, start: date, end: date) -> list[RateRecord]:
        self.calls.append((series_code, start, end))
        if self.failures > 0:
            self.failures -= 1
            raise SourceUnavailable("SGS returned HTTP 503 for series 4390")
        return [r for r in self.records if start <= r.date <= end]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def source_settings() -> SourceSettings:
    """SGS settings with no retry delay so failing tests run instantly."""
    return SourceSettings(retry_base_delay=0.0)


@pytest.fixture
def correction_settings() -> CorrectionSettings:
    return CorrectionSettings()


@pytest.fixture
def mock_settings(source_settings: SourceSettings) -> AppSettings:
    """Return AppSettings with test defaults."""
    return AppSettings(log_level="DEBUG", source=source_settings)


@pytest.fixture
def engine(correction_settings: CorrectionSettings) -> AccrualEngine:
    return AccrualEngine(correction_settings)


@pytest.fixture
def fine_calculator() -> FineCalculator:
    return FineCalculator()


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource(SAMPLE_RECORDS)


@pytest.fixture
def make_service(
    source_settings: SourceSettings,
    correction_settings: CorrectionSettings,
    engine: AccrualEngine,
    fine_calculator: FineCalculator,
):
    """Factory building a CorrectionService over a given source, frozen at TODAY."""

    def _make(source: RateSeriesSource) -> CorrectionService:
        return CorrectionService(
            fetcher=SeriesFetcher(source, source_settings),
            engine=engine,
            fine_calculator=fine_calculator,
            settings=correction_settings,
            series_code=source_settings.series_code,
            today=lambda: TODAY,
        )

    return _make
