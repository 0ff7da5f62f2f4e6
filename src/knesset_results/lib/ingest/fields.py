"""Field Normalizer and Meta-Field Classifier.

Every round's export names its columns differently.  Column names are first
mapped to the canonical vocabulary (the names used by the most recent
rounds), then classified as fixed metadata or as a per-party vote column.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from knesset_results.lib.reference.types import FieldVocabulary

# Canonical metadata field names (after normalization)
CITY_NAME = "שם ישוב"
CITY_CODE = "סמל ישוב"
ELIGIBLE_VOTERS = "בזב"
TOTAL_VOTES = "מצביעים"
INVALID_VOTES = "פסולים"
VALID_VOTES = "כשרים"
BALLOT_NUMBER = "מספר קלפי"

META_FIELDS: frozenset[str] = frozenset(
    {
        CITY_NAME,
        CITY_CODE,
        ELIGIBLE_VOTERS,
        TOTAL_VOTES,
        INVALID_VOTES,
        VALID_VOTES,
        BALLOT_NUMBER,
        "סמל ועדה",
        "ברזל",
        "שם ועדה",
        "קלפי",
        "_id",
    }
)

# Word roots that only ever appear in metadata columns
_META_PREFIXES = ("_", "שם", "סמל", "מספר")
_META_SUBSTRINGS = ("ברזל", "קלפי", "ועדה")


def normalize_field_name(field: str, vocabulary: FieldVocabulary) -> str:
    """Map a raw column name to its canonical name.

    Args:
        field: Raw column name as it appears in the source.
        vocabulary: Alias table for historical spellings.

    Returns:
        The canonical name, or the trimmed input when no alias applies.
    """
    trimmed = field.strip()
    return vocabulary.aliases.get(trimmed) or vocabulary.aliases.get(field) or trimmed


def normalize_record(row: Mapping[str, Any], vocabulary: FieldVocabulary) -> dict[str, Any]:
    """Return a copy of a raw record with every key normalized."""
    return {normalize_field_name(str(key), vocabulary): value for key, value in row.items()}


def is_meta_field(field: str, vocabulary: FieldVocabulary) -> bool:
    """Decide whether a normalized column is metadata rather than a party vote column.

    Decision order: the fixed metadata set, then the one-off historical
    columns, then metadata word-root heuristics.
    """
    trimmed = field.strip()
    if trimmed in META_FIELDS:
        return True
    if trimmed in vocabulary.extraMetaFields or field in vocabulary.extraMetaFields:
        return True
    if trimmed.startswith(_META_PREFIXES):
        return True
    return any(root in trimmed for root in _META_SUBSTRINGS)


def detect_party_fields(
    records: Sequence[Mapping[str, Any]],
    vocabulary: FieldVocabulary,
) -> list[str]:
    """Detect the party vote columns of a round.

    Classification runs once, on the field set of the first (already
    normalized) record, so every record of the round shares one party set.

    Args:
        records: Normalized records of one round.
        vocabulary: Field vocabulary for the classifier.

    Returns:
        Party columns in source column order.
    """
    if not records:
        return []
    return [f for f in records[0] if f.strip() and not is_meta_field(f, vocabulary)]
