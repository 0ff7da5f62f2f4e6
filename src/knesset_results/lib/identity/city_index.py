"""City Identity Resolver.

``CityIndex`` is the cross-round store of city identities: code → canonical
name plus alias spellings.  The orchestrator owns a single instance and
threads it through every round explicitly.

Naming policy: the first round that mentions a code seeds its canonical
name; later spellings become aliases.  The authoritative naming round
overrides that rule (see ``apply_authoritative_names``).
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from loguru import logger
from pydantic import BaseModel

from knesset_results.lib.ingest.coercer import normalize_city_name
from knesset_results.lib.ingest.types import SPECIAL_BOX_CITY_CODE, CityRoundRecord
from knesset_results.lib.reference.types import Coordinates

UNMATCHED_SAMPLE_SIZE = 10


class CityIdentity(BaseModel):
    """A city as published in the consolidated document."""

    code: str
    name: str
    aliases: list[str] | None = None
    lat: float | None = None
    lng: float | None = None


@dataclass
class CityEntry:
    """Mutable index entry for one city code."""

    code: str
    name: str
    aliases: set[str] = field(default_factory=set)

    def add_alias(self, name: str) -> bool:
        """Record a spelling other than the canonical name. Returns True if new."""
        if not name or name == self.name or name in self.aliases:
            return False
        self.aliases.add(name)
        return True

    def rename(self, name: str) -> None:
        """Make ``name`` canonical, keeping the previous canonical name as an alias."""
        if name == self.name:
            return
        previous = self.name
        self.name = name
        self.aliases.discard(name)
        self.aliases.add(previous)


@dataclass
class BackfillResult:
    """Outcome of name-matching backfill for one round."""

    matched: int = 0
    unmatched: int = 0
    unmatched_names: list[str] = field(default_factory=list)


class CityIndex:
    """Cross-round city identity store keyed by city code."""

    def __init__(self) -> None:
        self._entries: dict[str, CityEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, code: object) -> bool:
        return code in self._entries

    def get(self, code: str) -> CityEntry | None:
        return self._entries.get(code)

    def observe(self, records: Iterable[CityRoundRecord]) -> int:
        """Fold one round's city records into the index.

        A new code seeds its canonical name from the record.  A known code
        whose record spells the name differently gains an alias; its canonical
        name never changes here.  Code-less records and the special-box
        sentinel are ignored.

        Returns:
            Number of codes added to the index.
        """
        added = 0
        for record in records:
            code = record.cityCode
            if not code or code == SPECIAL_BOX_CITY_CODE:
                continue
            entry = self._entries.get(code)
            if entry is None:
                self._entries[code] = CityEntry(code=code, name=record.cityName)
                added += 1
            else:
                entry.add_alias(record.cityName)
        return added

    def name_lookup(self) -> dict[str, str]:
        """Build a normalized-name → code lookup over canonical names and aliases.

        A name that maps to more than one code is left out, so backfill never
        has to pick between candidates.
        """
        candidates: dict[str, set[str]] = {}
        for entry in self._entries.values():
            for name in (entry.name, *entry.aliases):
                key = normalize_city_name(name)
                if key:
                    candidates.setdefault(key, set()).add(entry.code)

        lookup: dict[str, str] = {}
        for key, codes in candidates.items():
            if len(codes) == 1:
                lookup[key] = next(iter(codes))
            else:
                logger.warning("City name '{}' is shared by codes {}, excluded from matching", key, sorted(codes))
        return lookup

    def backfill_codes(self, records: Iterable[CityRoundRecord]) -> BackfillResult:
        """Assign codes to code-less records by exact normalized-name match.

        Records are updated in place.  A record with no match keeps an empty
        code and is reported in the result.
        """
        lookup = self.name_lookup()
        result = BackfillResult()
        for record in records:
            if record.cityCode:
                continue
            code = lookup.get(normalize_city_name(record.cityName))
            if code:
                record.cityCode = code
                result.matched += 1
            else:
                result.unmatched += 1
                result.unmatched_names.append(record.cityName)

        logger.info("City code matching: {} matched, {} unmatched", result.matched, result.unmatched)
        if result.unmatched_names:
            logger.info("Unmatched sample: {}", ", ".join(result.unmatched_names[:UNMATCHED_SAMPLE_SIZE]))
        return result

    def apply_authoritative_names(
        self,
        records: Iterable[CityRoundRecord],
        overrides: Mapping[str, str],
    ) -> int:
        """Make the authoritative round's names canonical.

        Each record's name, corrected through ``overrides``, becomes the
        canonical name of its code.  The previous canonical name and the
        uncorrected upstream spelling are kept as aliases.

        Returns:
            Number of records whose name was corrected by an override.
        """
        corrected = 0
        for record in records:
            code = record.cityCode
            if not code or code == SPECIAL_BOX_CITY_CODE:
                continue
            raw_name = record.cityName
            display_name = overrides.get(raw_name, raw_name)
            if display_name != raw_name:
                corrected += 1

            entry = self._entries.get(code)
            if entry is None:
                entry = CityEntry(code=code, name=display_name)
                self._entries[code] = entry
            else:
                entry.rename(display_name)
            entry.add_alias(raw_name)

        logger.info("Applied {} city name overrides", corrected)
        return corrected

    def to_city_list(self, coordinates: Mapping[str, Coordinates] | None = None) -> list[CityIdentity]:
        """Render the index as the consolidated city list, sorted by name then code."""
        coordinates = coordinates or {}
        cities = []
        for entry in self._entries.values():
            coord = coordinates.get(entry.code)
            cities.append(
                CityIdentity(
                    code=entry.code,
                    name=entry.name,
                    aliases=sorted(entry.aliases) or None,
                    lat=coord.lat if coord else None,
                    lng=coord.lng if coord else None,
                )
            )
        cities.sort(key=lambda c: (c.name, c.code))
        return cities
