"""Reference data library — rounds, parties, field vocabulary, city names.

Public API:
    - load_reference_data: Load and validate the bundled JSON reference files
    - resolve_party_name: Ballot letter + round id to display name
    - ReferenceData: The validated, frozen reference bundle
    - ReferenceDataError: Raised on missing or inconsistent reference data
"""

from knesset_results.lib.reference.loader import ReferenceDataError, load_reference_data
from knesset_results.lib.reference.parties import parties_in_round, resolve_party_name
from knesset_results.lib.reference.types import (
    Coordinates,
    DataCompleteness,
    DataSource,
    FieldVocabulary,
    PartyAlias,
    PartyInfo,
    ReferenceData,
    RoundMeta,
    RoundSources,
)

__all__ = [
    "Coordinates",
    "DataCompleteness",
    "DataSource",
    "FieldVocabulary",
    "PartyAlias",
    "PartyInfo",
    "ReferenceData",
    "ReferenceDataError",
    "RoundMeta",
    "RoundSources",
    "load_reference_data",
    "parties_in_round",
    "resolve_party_name",
]
