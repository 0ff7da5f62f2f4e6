"""Typed vote records produced by the coercer and the aggregator.

Field names use camelCase because they are the artifact contract read by
the front end.
"""

# ruff: noqa: N815

from pydantic import BaseModel, Field

Number = int | float

SPECIAL_BOX_CITY_CODE = "0"


class CityRoundRecord(BaseModel):
    """One city's results within one round."""

    cityCode: str
    cityName: str
    eligibleVoters: Number = 0
    totalVotes: Number = 0
    invalidVotes: Number = 0
    validVotes: Number = 0
    parties: dict[str, Number] = Field(default_factory=dict)

    @property
    def group_key(self) -> str:
        """City code when known, otherwise the normalized city name."""
        return self.cityCode or self.cityName


class BallotBoxRecord(BaseModel):
    """One ballot box's results within one round."""

    id: str
    cityCode: str
    cityName: str
    ballotNumber: Number = 0
    eligibleVoters: Number = 0
    totalVotes: Number = 0
    invalidVotes: Number = 0
    validVotes: Number = 0
    parties: dict[str, Number] = Field(default_factory=dict)

    @property
    def group_key(self) -> str:
        """City code when known, otherwise the normalized city name."""
        return self.cityCode or self.cityName


def ballot_box_id(round_id: int, city_code: str, city_name: str, ballot_number: Number) -> str:
    """Build the synthetic ``{roundId}-{cityCode-or-name}-{ballotNumber}`` identifier."""
    return f"{round_id}-{city_code or city_name}-{ballot_number}"


def derive_invalid_votes(records: list[CityRoundRecord] | list[BallotBoxRecord]) -> None:
    """Set ``invalidVotes = totalVotes - validVotes`` on every record, in place."""
    for record in records:
        record.invalidVotes = record.totalVotes - record.validVotes
