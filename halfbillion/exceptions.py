"""Errors raised while refreshing the download statistics."""

from typing import Optional


class StatsError(Exception):
    """Base exception for stats refresh failures."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        self.url = url
        super().__init__(message)


class FetchError(StatsError):
    """The stats page could not be downloaded (network, timeout, non-200)."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, url=url)


class ParseError(StatsError):
    """The embedded stats block is missing or is not valid JSON."""


class SchemaError(StatsError):
    """The stats JSON lacks a required field."""
