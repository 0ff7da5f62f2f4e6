"""Sources library — upstream API, legacy spreadsheet, and coordinate registry.

Public API:
    - fetch_all_records: Paginated fetch of a CKAN datastore resource
    - read_legacy_spreadsheet: First-sheet rows of the legacy spreadsheet
    - fetch_settlement_coords: Bundled coordinates supplemented by the registry
    - SourceError: Base error for an unreadable round source
    - FetchError: HTTP/envelope error type
    - MissingSourceError: Required source absent
"""

from knesset_results.lib.sources.ckan import fetch_all_records, fetch_page
from knesset_results.lib.sources.coordinates import fetch_settlement_coords, merge_coordinates
from knesset_results.lib.sources.errors import FetchError, MissingSourceError, SourceError, SpreadsheetReadError
from knesset_results.lib.sources.spreadsheet import read_legacy_spreadsheet

__all__ = [
    "FetchError",
    "MissingSourceError",
    "SourceError",
    "SpreadsheetReadError",
    "fetch_all_records",
    "fetch_page",
    "fetch_settlement_coords",
    "merge_coordinates",
    "read_legacy_spreadsheet",
]
