"""Pydantic models for the static reference data bundle.

Field names use camelCase to match the JSON documents consumed by the
front end (``meta.json`` embeds rounds, parties, and completeness as-is).
"""

# ruff: noqa: N815

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class DataSource(StrEnum):
    """Provenance of a round's data."""

    CKAN_API = "ckan-api"
    CKAN_API_AGGREGATED = "ckan-api-aggregated"
    XLS_ODATA = "xls-odata"


class RoundMeta(BaseModel):
    """One electoral cycle."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    date: str
    year: int


class DataCompleteness(BaseModel):
    """Which data a round's sources provide, and where it came from."""

    model_config = ConfigDict(frozen=True)

    hasPerCityData: bool
    hasPerBallotBoxData: bool
    hasEligibleVoters: bool
    hasCityCodes: bool
    hasInvalidVotes: bool
    dataSource: DataSource
    notes: str | None = None


class RoundSources(BaseModel):
    """CKAN resource ids for a round (None when the granularity is unavailable)."""

    model_config = ConfigDict(frozen=True)

    factions: str | None = None
    individuals: str | None = None


class PartyAlias(BaseModel):
    """Display names a ballot letter carried in one specific round."""

    model_config = ConfigDict(frozen=True)

    nameHe: str
    nameEn: str


class PartyInfo(BaseModel):
    """A ballot letter with its default party, colour, and per-round seats."""

    model_config = ConfigDict(frozen=True)

    letter: str
    nameHe: str
    nameEn: str
    color: str
    seats: dict[int, int] = Field(default_factory=dict)
    aliasRounds: dict[int, PartyAlias] | None = None


class FieldVocabulary(BaseModel):
    """Column-name aliases and one-off historical metadata columns."""

    model_config = ConfigDict(frozen=True)

    aliases: dict[str, str] = Field(default_factory=dict)
    extraMetaFields: frozenset[str] = Field(default_factory=frozenset)


class Coordinates(BaseModel):
    """WGS84 point."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


@dataclass(frozen=True)
class ReferenceData:
    """The full static reference bundle, validated and cross-checked.

    Attributes:
        rounds: Rounds in processing order.
        completeness: Completeness descriptor per round id.
        sources: CKAN resource ids per round id.
        parties: Party table keyed by ballot letter.
        fields: Field-name vocabulary for the normalizer and classifier.
        city_name_overrides: Raw authoritative-round name to display name.
        coordinates: Settlement coordinates keyed by city code.
    """

    rounds: tuple[RoundMeta, ...]
    completeness: dict[int, DataCompleteness]
    sources: dict[int, RoundSources]
    parties: dict[str, PartyInfo]
    fields: FieldVocabulary
    city_name_overrides: dict[str, str]
    coordinates: dict[str, Coordinates]

    def get_round(self, round_id: int) -> RoundMeta | None:
        """Return the round with the given id, or None."""
        for round_meta in self.rounds:
            if round_meta.id == round_id:
                return round_meta
        return None
