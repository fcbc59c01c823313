"""Exceptions raised by the SELIC correction service.

Every error the service surfaces derives from SelicError so that the API
layer can map the whole family in one place.
"""


class SelicError(Exception):
    """Base exception for all correction errors."""


class ValidationError(SelicError):
    """Raised when request input is missing or inconsistent.

    Covers missing fields, an end date not after the start date, dates in
    the future and dates before the series' first publication.
    """


class NoDataError(SelicError):
    """Raised when the rate source returns no records for the fetch window."""


class SourceUnavailable(SelicError):
    """Raised when the rate source keeps failing after all retries."""


class InvalidAmount(SelicError, ValueError):
    """Raised when text or a number cannot be read as a decimal amount."""


class DivisionByZero(SelicError, ZeroDivisionError):
    """Raised when a Money value is divided by zero."""
