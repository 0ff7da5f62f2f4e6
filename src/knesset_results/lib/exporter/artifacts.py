"""Artifact documents read by the front end.

Layout under the output directory::

    rounds/{roundId}.json       {roundId, cities}
    ballotboxes/{roundId}.json  {roundId, ballotBoxes}
    meta.json                   {rounds, parties, cities, dataCompleteness}
"""

from collections.abc import Mapping, Sequence
from pathlib import Path

from loguru import logger

from knesset_results.lib.exporter.json_writer import write_json, write_json_documents
from knesset_results.lib.identity.city_index import CityIdentity
from knesset_results.lib.ingest.types import BallotBoxRecord, CityRoundRecord
from knesset_results.lib.reference.types import DataCompleteness, PartyInfo, RoundMeta

ROUNDS_DIR = "rounds"
BALLOT_BOXES_DIR = "ballotboxes"
META_FILENAME = "meta.json"


def round_cities_path(output_dir: Path, round_id: int) -> Path:
    return output_dir / ROUNDS_DIR / f"{round_id}.json"


def round_ballot_boxes_path(output_dir: Path, round_id: int) -> Path:
    return output_dir / BALLOT_BOXES_DIR / f"{round_id}.json"


def round_cities_document(round_id: int, cities: Sequence[CityRoundRecord]) -> dict:
    return {"roundId": round_id, "cities": [c.model_dump(mode="json") for c in cities]}


def round_ballot_boxes_document(round_id: int, ballot_boxes: Sequence[BallotBoxRecord]) -> dict:
    return {"roundId": round_id, "ballotBoxes": [b.model_dump(mode="json") for b in ballot_boxes]}


def write_round(
    output_dir: Path,
    round_id: int,
    cities: Sequence[CityRoundRecord],
    ballot_boxes: Sequence[BallotBoxRecord],
) -> tuple[Path, Path]:
    """Write ``rounds/{round_id}.json`` and ``ballotboxes/{round_id}.json`` together.

    Either both documents are replaced or the pair is left without a
    mismatched member; see :func:`write_json_documents`.

    Returns:
        Tuple of (cities path, ballot-boxes path).
    """
    cities_path = round_cities_path(output_dir, round_id)
    boxes_path = round_ballot_boxes_path(output_dir, round_id)
    write_json_documents(
        {
            cities_path: round_cities_document(round_id, cities),
            boxes_path: round_ballot_boxes_document(round_id, ballot_boxes),
        }
    )
    logger.info(
        "Written {}/{}.json ({} cities) and {}/{}.json ({} ballot boxes)",
        ROUNDS_DIR,
        round_id,
        len(cities),
        BALLOT_BOXES_DIR,
        round_id,
        len(ballot_boxes),
    )
    return cities_path, boxes_path



def build_meta_document(
    rounds: Sequence[RoundMeta],
    parties: Mapping[str, PartyInfo],
    cities: Sequence[CityIdentity],
    completeness: Mapping[int, DataCompleteness],
) -> dict:
    """Assemble the consolidated document.

    Round-keyed maps are emitted with string keys, as JSON requires.
    Optional fields that are unset are omitted rather than written as null.
    """
    return {
        "rounds": [r.model_dump(mode="json") for r in rounds],
        "parties": {letter: p.model_dump(mode="json", exclude_none=True) for letter, p in parties.items()},
        "cities": [c.model_dump(mode="json", exclude_none=True) for c in cities],
        "dataCompleteness": {
            str(round_id): d.model_dump(mode="json", exclude_none=True) for round_id, d in completeness.items()
        },
    }


def write_meta(
    output_dir: Path,
    rounds: Sequence[RoundMeta],
    parties: Mapping[str, PartyInfo],
    cities: Sequence[CityIdentity],
    completeness: Mapping[int, DataCompleteness],
) -> Path:
    """Write ``meta.json``."""
    path = output_dir / META_FILENAME
    write_json(path, build_meta_document(rounds, parties, cities, completeness))
    logger.info("Written {} ({} rounds, {} cities)", META_FILENAME, len(rounds), len(cities))
    return path
