"""Shared error types for property record lookups."""

from __future__ import annotations


class PropertyDataError(Exception):
    """Base class for all property data errors."""


class InvalidBBLError(PropertyDataError, ValueError):
    """Raised when a Borough-Block-Lot key is malformed. No fetch is attempted."""


class DatasetUnavailableError(PropertyDataError):
    """Raised when a backing dataset cannot be reached."""


class DatasetQueryError(PropertyDataError):
    """Raised when a query against a reachable dataset fails."""


class UpstreamFetchError(PropertyDataError):
    """A required fetch failed for a specific BBL."""

    def __init__(self, bbl: str, message: str) -> None:
        super().__init__(message)
        self.bbl = bbl


class DocumentFetchError(UpstreamFetchError):
    """Raised when ACRIS documents could not be fetched for a BBL."""


class ValuationFetchError(UpstreamFetchError):
    """Raised when DOF valuation snapshots could not be fetched for a BBL."""
