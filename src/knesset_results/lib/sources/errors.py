"""Error types raised while reading upstream sources."""


class SourceError(Exception):
    """Base class for a round source that could not be read."""


class FetchError(SourceError):
    """Raised when fetching records from the upstream API fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MissingSourceError(SourceError):
    """Raised when a round's required source is not available."""


class SpreadsheetReadError(SourceError):
    """Raised when the legacy spreadsheet exists but cannot be parsed."""
