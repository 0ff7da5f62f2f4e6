"""Ingest library — normalize, classify, coerce, and aggregate raw vote records.

Public API:
    - normalize_field_name / normalize_record: Canonical column names
    - is_meta_field / detect_party_fields: Metadata vs. party-vote columns
    - coerce_city_record / coerce_ballot_box_record: Typed records from raw rows
    - aggregate_ballot_boxes: Ballot-box records to city records
    - CityRoundRecord / BallotBoxRecord: Artifact record models
"""

from knesset_results.lib.ingest.aggregator import aggregate_ballot_boxes
from knesset_results.lib.ingest.coercer import (
    coerce_ballot_box_record,
    coerce_city_record,
    normalize_city_code,
    normalize_city_name,
    to_number,
)
from knesset_results.lib.ingest.fields import (
    META_FIELDS,
    detect_party_fields,
    is_meta_field,
    normalize_field_name,
    normalize_record,
)
from knesset_results.lib.ingest.types import (
    SPECIAL_BOX_CITY_CODE,
    BallotBoxRecord,
    CityRoundRecord,
    ballot_box_id,
    derive_invalid_votes,
)

__all__ = [
    "META_FIELDS",
    "SPECIAL_BOX_CITY_CODE",
    "BallotBoxRecord",
    "CityRoundRecord",
    "aggregate_ballot_boxes",
    "ballot_box_id",
    "coerce_ballot_box_record",
    "coerce_city_record",
    "derive_invalid_votes",
    "detect_party_fields",
    "is_meta_field",
    "normalize_city_code",
    "normalize_city_name",
    "normalize_field_name",
    "normalize_record",
    "to_number",
]
