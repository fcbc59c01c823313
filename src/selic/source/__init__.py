"""Rate-series source layer -- Banco Central SGS API integration via httpx."""

from selic.source.bcb_client import BcbSgsClient
from selic.source.client import RateSeriesSource

__all__ = ["BcbSgsClient", "RateSeriesSource"]
