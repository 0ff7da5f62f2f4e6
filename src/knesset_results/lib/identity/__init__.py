"""Identity library — cross-round city identity resolution.

Public API:
    - CityIndex: Code → canonical name/aliases store with name backfill
    - CityIdentity: Consolidated city document entry
    - BackfillResult: Matched/unmatched counts of a backfill run
"""

from knesset_results.lib.identity.city_index import BackfillResult, CityEntry, CityIdentity, CityIndex

__all__ = ["BackfillResult", "CityEntry", "CityIdentity", "CityIndex"]
