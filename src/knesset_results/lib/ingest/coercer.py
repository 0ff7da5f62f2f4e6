"""Record Coercer — raw cell values to typed vote records.

Coercion never raises: unparseable numbers become zero, and records that
cannot be placed in a city are dropped (returned as None).
"""

import math
import numbers
import re
from collections.abc import Mapping, Sequence
from typing import Any

from knesset_results.lib.ingest.fields import (
    BALLOT_NUMBER,
    CITY_CODE,
    CITY_NAME,
    ELIGIBLE_VOTERS,
    INVALID_VOTES,
    TOTAL_VOTES,
    VALID_VOTES,
)
from knesset_results.lib.ingest.types import (
    SPECIAL_BOX_CITY_CODE,
    BallotBoxRecord,
    CityRoundRecord,
    Number,
    ballot_box_id,
)

_WHITESPACE_RUN = re.compile(r"\s+")
_DASHES = str.maketrans({"–": "-", "—": "-"})


def to_number(value: Any) -> Number:
    """Coerce a raw cell to a number, defaulting to zero.

    Native numbers pass through, numeric strings (including ``"0.0"``-style
    artifacts) are parsed, and anything else becomes 0.  Integral values are
    returned as ``int``.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value) if value.strip() else 0.0
        except ValueError:
            return 0
    else:
        return 0

    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def normalize_city_name(name: Any) -> str:
    """Trim, collapse whitespace runs, and turn en/em dashes into ASCII hyphens."""
    if name is None or (isinstance(name, float) and math.isnan(name)):
        return ""
    return _WHITESPACE_RUN.sub(" ", str(name).strip()).translate(_DASHES)


def normalize_city_code(value: Any) -> str:
    """Render a city code as a clean string.

    ``"0"``/``"0.0"`` (collective boxes such as double envelopes) become the
    sentinel ``"0"``; a trailing ``".0"`` spreadsheet artifact is stripped.
    """
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        if value.is_integer():
            return str(int(value))
    code = str(value).strip()
    if code in ("0", "0.0"):
        return SPECIAL_BOX_CITY_CODE
    return code.removesuffix(".0")


def _party_votes(row: Mapping[str, Any], party_fields: Sequence[str]) -> dict[str, Number]:
    """Collect party vote counts, keeping only parties with at least one vote."""
    parties: dict[str, Number] = {}
    for field in party_fields:
        votes = to_number(row.get(field))
        if votes > 0:
            parties[field] = votes
    return parties


def coerce_city_record(
    row: Mapping[str, Any],
    party_fields: Sequence[str],
    *,
    has_eligible_voters: bool = True,
) -> CityRoundRecord | None:
    """Build a CityRoundRecord from a normalized per-city row.

    Returns:
        The record, or None when the row lacks a city name or city code.
    """
    city_name = normalize_city_name(row.get(CITY_NAME))
    city_code = normalize_city_code(row.get(CITY_CODE))
    if not city_name or not city_code:
        return None

    return CityRoundRecord(
        cityCode=city_code,
        cityName=city_name,
        eligibleVoters=to_number(row.get(ELIGIBLE_VOTERS)) if has_eligible_voters else 0,
        totalVotes=to_number(row.get(TOTAL_VOTES)),
        invalidVotes=to_number(row.get(INVALID_VOTES)),
        validVotes=to_number(row.get(VALID_VOTES)),
        parties=_party_votes(row, party_fields),
    )


def coerce_ballot_box_record(
    row: Mapping[str, Any],
    party_fields: Sequence[str],
    round_id: int,
    *,
    has_city_codes: bool = True,
    has_eligible_voters: bool = True,
) -> BallotBoxRecord | None:
    """Build a BallotBoxRecord from a normalized per-ballot-box row.

    For rounds without city codes the code is left empty and the city name
    becomes the grouping key.  For rounds with codes, a row without one is
    dropped; collective boxes carry the ``"0"`` sentinel and are kept.

    Returns:
        The record, or None when the row cannot be attributed to a city.
    """
    city_name = normalize_city_name(row.get(CITY_NAME))
    if not city_name:
        return None

    city_code = normalize_city_code(row.get(CITY_CODE)) if has_city_codes else ""
    if has_city_codes and not city_code:
        return None

    ballot_number = to_number(row.get(BALLOT_NUMBER))
    return BallotBoxRecord(
        id=ballot_box_id(round_id, city_code, city_name, ballot_number),
        cityCode=city_code,
        cityName=city_name,
        ballotNumber=ballot_number,
        eligibleVoters=to_number(row.get(ELIGIBLE_VOTERS)) if has_eligible_voters else 0,
        totalVotes=to_number(row.get(TOTAL_VOTES)),
        invalidVotes=to_number(row.get(INVALID_VOTES)),
        validVotes=to_number(row.get(VALID_VOTES)),
        parties=_party_votes(row, party_fields),
    )
