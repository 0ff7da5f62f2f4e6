"""Load and validate the reference data bundle.

The JSON files live in the ``data/`` directory next to this module.  A
directory passed as ``override_dir`` may replace any subset of them; files
missing from the override directory fall back to the bundled copies.
"""

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from knesset_results.lib.reference.types import (
    Coordinates,
    DataCompleteness,
    FieldVocabulary,
    PartyInfo,
    ReferenceData,
    RoundMeta,
    RoundSources,
)

BUNDLED_DATA_DIR = Path(__file__).parent / "data"

_ROUNDS = TypeAdapter(list[RoundMeta])
_COMPLETENESS = TypeAdapter(dict[int, DataCompleteness])
_SOURCES = TypeAdapter(dict[int, RoundSources])
_PARTIES = TypeAdapter(dict[str, PartyInfo])
_OVERRIDES = TypeAdapter(dict[str, str])
_COORDINATES = TypeAdapter(dict[str, Coordinates])


class ReferenceDataError(Exception):
    """Raised when reference data is missing, malformed, or inconsistent."""


def _read_json(filename: str, override_dir: Path | None) -> Any:
    """Read one reference file, preferring the override directory."""
    path = BUNDLED_DATA_DIR / filename
    if override_dir is not None and (override_dir / filename).exists():
        path = override_dir / filename
        logger.debug("Using reference override {}", path)

    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as exc:
        msg = f"Reference file not found: {path}"
        raise ReferenceDataError(msg) from exc
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in reference file {path}: {exc}"
        raise ReferenceDataError(msg) from exc


def _check_consistency(data: ReferenceData) -> None:
    """Cross-check the round-keyed tables against the round list.

    Raises:
        ReferenceDataError: On the first inconsistency found.
    """
    round_ids = {r.id for r in data.rounds}
    if len(round_ids) != len(data.rounds):
        msg = "rounds.json contains duplicate round ids"
        raise ReferenceDataError(msg)

    for table_name, table in (("completeness", data.completeness), ("sources", data.sources)):
        unknown = set(table) - round_ids
        if unknown:
            msg = f"{table_name} references unknown rounds: {sorted(unknown)}"
            raise ReferenceDataError(msg)

    missing = round_ids - set(data.completeness)
    if missing:
        msg = f"completeness is missing rounds: {sorted(missing)}"
        raise ReferenceDataError(msg)

    for letter, party in data.parties.items():
        if party.letter != letter:
            msg = f"Party keyed '{letter}' declares letter '{party.letter}'"
            raise ReferenceDataError(msg)
        unknown = set(party.seats) - round_ids
        if unknown:
            msg = f"Party '{letter}' has seats for unknown rounds: {sorted(unknown)}"
            raise ReferenceDataError(msg)
        # An alias only makes sense for a round in which the letter was on the ballot
        alias_rounds = set(party.aliasRounds or {})
        stray = alias_rounds - set(party.seats)
        if stray:
            msg = f"Party '{letter}' has alias names for rounds it did not run in: {sorted(stray)}"
            raise ReferenceDataError(msg)


def load_reference_data(override_dir: Path | None = None) -> ReferenceData:
    """Load, validate, and cross-check all reference files.

    Args:
        override_dir: Optional directory whose files replace the bundled ones.

    Returns:
        A frozen ReferenceData bundle.

    Raises:
        ReferenceDataError: If any file is missing, malformed, or inconsistent.
    """
    try:
        data = ReferenceData(
            rounds=tuple(_ROUNDS.validate_python(_read_json("rounds.json", override_dir))),
            completeness=_COMPLETENESS.validate_python(_read_json("completeness.json", override_dir)),
            sources=_SOURCES.validate_python(_read_json("sources.json", override_dir)),
            parties=_PARTIES.validate_python(_read_json("parties.json", override_dir)),
            fields=FieldVocabulary.model_validate(_read_json("fields.json", override_dir)),
            city_name_overrides=_OVERRIDES.validate_python(_read_json("city_name_overrides.json", override_dir)),
            coordinates=_COORDINATES.validate_python(_read_json("coordinates.json", override_dir)),
        )
    except ValidationError as exc:
        msg = f"Reference data failed validation: {exc}"
        raise ReferenceDataError(msg) from exc

    _check_consistency(data)
    logger.debug(
        "Loaded reference data: {} rounds, {} parties, {} city name overrides",
        len(data.rounds),
        len(data.parties),
        len(data.city_name_overrides),
    )
    return data
