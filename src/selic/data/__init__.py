"""Rate data pipeline.

Provides month arithmetic for correction periods and the paginated,
retrying series fetcher with business-day adjustment.
"""

from selic.data.dates import add_months, fetch_window
from selic.data.fetcher import SeriesFetcher

__all__ = ["SeriesFetcher", "add_months", "fetch_window"]
