"""Round pipeline service — runs every round through ingestion and writes artifacts.

Rounds are processed sequentially in reference order.  Each round is fetched
in full and transformed before anything is written, so a failed round leaves
no artifacts behind.  A round joins the city index, and so the consolidated
city list, only after its artifact pair is written.  The round without city
codes is held back until every other round has been indexed, then
backfilled and written.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

import httpx
from loguru import logger

from knesset_results.core.config import Settings
from knesset_results.lib.exporter import write_meta, write_round
from knesset_results.lib.identity import BackfillResult, CityIndex
from knesset_results.lib.ingest import (
    BallotBoxRecord,
    CityRoundRecord,
    aggregate_ballot_boxes,
    coerce_ballot_box_record,
    coerce_city_record,
    derive_invalid_votes,
    detect_party_fields,
    normalize_record,
)
from knesset_results.lib.reference import (
    DataCompleteness,
    DataSource,
    FieldVocabulary,
    ReferenceData,
    RoundMeta,
    RoundSources,
)
from knesset_results.lib.sources import (
    MissingSourceError,
    SourceError,
    fetch_all_records,
    fetch_settlement_coords,
    read_legacy_spreadsheet,
)

PARTY_FIELD_SAMPLE_SIZE = 8


class RoundStrategy(StrEnum):
    """How a round's city-level records are obtained."""

    DIRECT = "direct"
    AGGREGATE = "aggregate"
    LEGACY_SPREADSHEET = "legacy_spreadsheet"


def select_strategy(completeness: DataCompleteness, sources: RoundSources) -> RoundStrategy:
    """Pick the strategy for a round from its completeness descriptor and sources."""
    if completeness.dataSource == DataSource.XLS_ODATA:
        return RoundStrategy.LEGACY_SPREADSHEET
    if completeness.hasPerCityData and sources.factions:
        return RoundStrategy.DIRECT
    if sources.individuals:
        return RoundStrategy.AGGREGATE
    return RoundStrategy.DIRECT


@dataclass
class RoundOutput:
    """Records produced for one round, before they are written."""

    round_id: int
    strategy: RoundStrategy
    cities: list[CityRoundRecord]
    ballot_boxes: list[BallotBoxRecord]
    party_fields: list[str] = field(default_factory=list)


@dataclass
class RoundResult:
    """Outcome of processing one round."""

    round_id: int
    strategy: RoundStrategy | None = None
    succeeded: bool = False
    city_count: int = 0
    ballot_box_count: int = 0
    error: str | None = None


@dataclass
class PipelineResult:
    """Outcome of a full pipeline run."""

    rounds: list[RoundResult] = field(default_factory=list)
    backfill: dict[int, BackfillResult] = field(default_factory=dict)
    city_count: int = 0
    meta_path: Path | None = None

    @property
    def succeeded_rounds(self) -> list[int]:
        return [r.round_id for r in self.rounds if r.succeeded]

    @property
    def failed_rounds(self) -> list[int]:
        return [r.round_id for r in self.rounds if not r.succeeded]

    @property
    def ok(self) -> bool:
        return not self.failed_rounds


def _normalize_rows(rows: Iterable[dict[str, Any]], vocabulary: FieldVocabulary) -> list[dict[str, Any]]:
    return [normalize_record(row, vocabulary) for row in rows]


def _log_party_fields(round_id: int, granularity: str, party_fields: Sequence[str]) -> None:
    sample = ", ".join(party_fields[:PARTY_FIELD_SAMPLE_SIZE])
    suffix = "..." if len(party_fields) > PARTY_FIELD_SAMPLE_SIZE else ""
    logger.info("Round {} {}: {} party columns: {}{}", round_id, granularity, len(party_fields), sample, suffix)


def build_city_records(
    rows: Iterable[dict[str, Any]],
    round_id: int,
    completeness: DataCompleteness,
    vocabulary: FieldVocabulary,
) -> tuple[list[CityRoundRecord], list[str]]:
    """Normalize, classify, and coerce per-city rows.

    Returns:
        Tuple of (city records, party columns).
    """
    normalized = _normalize_rows(rows, vocabulary)
    party_fields = detect_party_fields(normalized, vocabulary)
    _log_party_fields(round_id, "cities", party_fields)

    cities = []
    for row in normalized:
        record = coerce_city_record(row, party_fields, has_eligible_voters=completeness.hasEligibleVoters)
        if record is not None:
            cities.append(record)

    dropped = len(normalized) - len(cities)
    if dropped:
        logger.debug("Round {}: dropped {} city rows without name or code", round_id, dropped)
    return cities, party_fields


def build_ballot_box_records(
    rows: Iterable[dict[str, Any]],
    round_id: int,
    completeness: DataCompleteness,
    vocabulary: FieldVocabulary,
) -> tuple[list[BallotBoxRecord], list[str]]:
    """Normalize, classify, and coerce per-ballot-box rows.

    Returns:
        Tuple of (ballot-box records, party columns).
    """
    normalized = _normalize_rows(rows, vocabulary)
    party_fields = detect_party_fields(normalized, vocabulary)
    _log_party_fields(round_id, "ballot boxes", party_fields)

    boxes = []
    for row in normalized:
        record = coerce_ballot_box_record(
            row,
            party_fields,
            round_id,
            has_city_codes=completeness.hasCityCodes,
            has_eligible_voters=completeness.hasEligibleVoters,
        )
        if record is not None:
            boxes.append(record)

    dropped = len(normalized) - len(boxes)
    if dropped:
        logger.debug("Round {}: dropped {} ballot-box rows that could not be attributed to a city", round_id, dropped)
    return boxes, party_fields


class RoundProcessor:
    """Loads and transforms a single round according to its strategy."""

    def __init__(self, settings: Settings, reference: ReferenceData, client: httpx.Client):
        self.settings = settings
        self.reference = reference
        self.client = client

    def _fetch(self, resource_id: str) -> list[dict[str, Any]]:
        return fetch_all_records(
            resource_id,
            api_url=self.settings.ckan_api_url,
            page_size=self.settings.ckan_page_size,
            client=self.client,
        )

    def process(self, round_meta: RoundMeta) -> RoundOutput:
        """Fetch and transform a round's records.

        Nothing is written and the city index is not touched; the caller
        folds the round in once its artifacts are committed.

        Args:
            round_meta: The round to process.

        Returns:
            The round's city and ballot-box records.

        Raises:
            SourceError: If any of the round's sources cannot be read.
        """
        round_id = round_meta.id
        completeness = self.reference.completeness[round_id]
        sources = self.reference.sources.get(round_id, RoundSources())
        vocabulary = self.reference.fields
        strategy = select_strategy(completeness, sources)
        logger.info("Processing {} (round {}) with strategy {}", round_meta.name, round_id, strategy)

        if strategy == RoundStrategy.DIRECT:
            if not sources.factions or not sources.individuals:
                msg = f"Round {round_id} is missing a per-city or per-ballot-box resource"
                raise MissingSourceError(msg)
            city_rows = self._fetch(sources.factions)
            box_rows = self._fetch(sources.individuals)
            cities, party_fields = build_city_records(city_rows, round_id, completeness, vocabulary)
            boxes, _ = build_ballot_box_records(box_rows, round_id, completeness, vocabulary)
        else:
            if strategy == RoundStrategy.LEGACY_SPREADSHEET:
                box_rows = read_legacy_spreadsheet(self.settings.legacy_spreadsheet_path)
            else:
                box_rows = self._fetch(sources.individuals)
            boxes, party_fields = build_ballot_box_records(box_rows, round_id, completeness, vocabulary)
            cities = aggregate_ballot_boxes(boxes, round_id)

        if not completeness.hasInvalidVotes:
            derive_invalid_votes(cities)
            derive_invalid_votes(boxes)
            logger.info("Round {}: derived invalid votes from totalVotes - validVotes", round_id)

        return RoundOutput(
            round_id=round_id,
            strategy=strategy,
            cities=cities,
            ballot_boxes=boxes,
            party_fields=party_fields,
        )


def _commit_round(output_dir: Path, output: RoundOutput, round_result: RoundResult) -> bool:
    """Write a round's artifact pair and record the outcome.

    Returns:
        True if both documents were written.
    """
    try:
        write_round(output_dir, output.round_id, output.cities, output.ballot_boxes)
    except OSError as e:
        round_result.error = f"Failed to write artifacts: {e}"
        logger.error("Round {} failed: {}", output.round_id, round_result.error)
        return False
    round_result.succeeded = True
    return True


def _observe(index: CityIndex, output: RoundOutput) -> None:
    added = index.observe(output.cities)
    logger.debug("Round {}: {} new city codes, index size {}", output.round_id, added, len(index))


def _select_rounds(reference: ReferenceData, round_ids: Iterable[int] | None) -> list[RoundMeta]:
    if round_ids is None:
        return list(reference.rounds)
    wanted = set(round_ids)
    unknown = wanted - {r.id for r in reference.rounds}
    if unknown:
        msg = f"Unknown rounds: {sorted(unknown)}"
        raise ValueError(msg)
    return [r for r in reference.rounds if r.id in wanted]


def run_pipeline(
    settings: Settings,
    reference: ReferenceData,
    round_ids: Iterable[int] | None = None,
    *,
    client: httpx.Client | None = None,
    fetch_coordinates: bool = False,
) -> PipelineResult:
    """Run the full pipeline and write all artifacts.

    A round whose sources fail is logged and skipped; the remaining rounds
    still run.  ``meta.json`` is built only from rounds that succeeded.

    Args:
        settings: Pipeline settings.
        reference: Validated reference data.
        round_ids: Optional subset of rounds (processed in reference order).
        client: Optional HTTP client; one is created from settings if omitted.
        fetch_coordinates: Whether to fill codes missing from the verified
            coordinate table from the CBS registry.  Off by default: only
            verified coordinates are published unless asked otherwise.

    Returns:
        A PipelineResult summarizing the run.

    Raises:
        ValueError: If ``round_ids`` names a round not in the reference data.
    """
    rounds = _select_rounds(reference, round_ids)

    if client is None:
        with httpx.Client(timeout=settings.ckan_timeout) as own_client:
            return run_pipeline(
                settings,
                reference,
                [r.id for r in rounds],
                client=own_client,
                fetch_coordinates=fetch_coordinates,
            )

    output_dir = settings.output_dir
    processor = RoundProcessor(settings, reference, client)
    result = PipelineResult()
    results_by_round: dict[int, RoundResult] = {}
    index = CityIndex()
    deferred: list[RoundOutput] = []
    authoritative: RoundOutput | None = None

    for round_meta in rounds:
        round_result = RoundResult(round_id=round_meta.id)
        result.rounds.append(round_result)
        results_by_round[round_meta.id] = round_result

        with logger.contextualize(round=round_meta.id):
            try:
                output = processor.process(round_meta)
            except SourceError as e:
                round_result.error = str(e)
                logger.error("Round {} failed: {}", round_meta.id, e)
                continue

            round_result.strategy = output.strategy
            round_result.city_count = len(output.cities)
            round_result.ballot_box_count = len(output.ballot_boxes)

            if not reference.completeness[round_meta.id].hasCityCodes:
                logger.info("Round {} has no city codes, deferring until all rounds are indexed", round_meta.id)
                deferred.append(output)
                continue

            if not _commit_round(output_dir, output, round_result):
                continue

            _observe(index, output)
            if round_meta.id == settings.authoritative_round:
                authoritative = output

    if authoritative is not None:
        with logger.contextualize(round=authoritative.round_id):
            index.apply_authoritative_names(authoritative.cities, reference.city_name_overrides)

    for output in deferred:
        with logger.contextualize(round=output.round_id):
            logger.info("Matching round {} city names to codes", output.round_id)
            backfill = index.backfill_codes(output.cities)
            if _commit_round(output_dir, output, results_by_round[output.round_id]):
                result.backfill[output.round_id] = backfill
                _observe(index, output)

    succeeded = set(result.succeeded_rounds)
    if not succeeded:
        logger.error("No round succeeded, meta.json not written")
        return result

    coordinates = dict(reference.coordinates)
    if fetch_coordinates:
        coordinates = fetch_settlement_coords(
            reference.coordinates,
            settings.coordinates_resource_id,
            api_url=settings.ckan_api_url,
            client=client,
        )

    cities = index.to_city_list(coordinates)
    result.city_count = len(cities)
    result.meta_path = write_meta(
        output_dir,
        [r for r in rounds if r.id in succeeded],
        reference.parties,
        cities,
        {round_id: d for round_id, d in reference.completeness.items() if round_id in succeeded},
    )

    logger.info(
        "Pipeline complete: {} rounds succeeded, {} failed {}",
        len(succeeded),
        len(result.failed_rounds),
        result.failed_rounds,
    )
    return result
