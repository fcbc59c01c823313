"""Configuration system using pydantic-settings with environment variable loading."""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

RoundingMode = Literal[
    "ROUND_HALF_UP",
    "ROUND_HALF_EVEN",
    "ROUND_HALF_DOWN",
    "ROUND_UP",
    "ROUND_DOWN",
    "ROUND_CEILING",
    "ROUND_FLOOR",
]


class SourceSettings(BaseSettings):
    """Banco Central SGS time-series API settings."""

    model_config = SettingsConfigDict(env_prefix="SOURCE_")

    base_url: str = "https://api.bcb.gov.br/dados/serie"
    series_code: int = 4390  # Taxa SELIC acumulada no mes (% a.m.)
    timeout: float = 30.0
    max_retries: int = 3
    retry_base_delay: float = 1.0  # linear: 1s, 2s, ...
    window_years: int = 10  # SGS refuses longer ranges
    business_day_lookahead_days: int = 7


class MoneySettings(BaseSettings):
    """Decimal arithmetic context used by every Money value."""

    model_config = SettingsConfigDict(env_prefix="MONEY_")

    precision: int = 20
    rounding: RoundingMode = "ROUND_HALF_UP"


class CorrectionSettings(BaseSettings):
    """Accrual policy parameters.

    The final month of a correction period is never fetched from the series;
    it is charged at ``final_month_rate`` percent instead.
    """

    model_config = SettingsConfigDict(env_prefix="CORRECTION_")

    final_month_rate: Decimal = Decimal("1.00")  # percent
    series_floor: date = date(1986, 7, 1)  # first month published by series 4390


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    enabled: bool = True


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    source: SourceSettings = SourceSettings()
    money: MoneySettings = MoneySettings()
    correction: CorrectionSettings = CorrectionSettings()
    api: ApiSettings = ApiSettings()
