"""Ballot→City Aggregator.

Sums ballot-box records into one city record per group key (city code when
present, otherwise city name).  Groups appear in first-seen order.
"""

from collections.abc import Iterable

from loguru import logger

from knesset_results.lib.ingest.types import BallotBoxRecord, CityRoundRecord


def aggregate_ballot_boxes(ballot_boxes: Iterable[BallotBoxRecord], round_id: int) -> list[CityRoundRecord]:
    """Aggregate ballot-box records into city records.

    The input records are not modified, so aggregating the same boxes twice
    yields equal results.

    Args:
        ballot_boxes: Coerced ballot-box records of one round.
        round_id: Round id, for logging.

    Returns:
        One CityRoundRecord per distinct group key.
    """
    cities: dict[str, CityRoundRecord] = {}
    box_count = 0

    for box in ballot_boxes:
        box_count += 1
        key = box.group_key
        city = cities.get(key)
        if city is None:
            city = CityRoundRecord(cityCode=box.cityCode, cityName=box.cityName)
            cities[key] = city

        city.eligibleVoters += box.eligibleVoters
        city.totalVotes += box.totalVotes
        city.invalidVotes += box.invalidVotes
        city.validVotes += box.validVotes

        for party, votes in box.parties.items():
            city.parties[party] = city.parties.get(party, 0) + votes

    logger.info("Aggregated {} ballot boxes into {} cities for round {}", box_count, len(cities), round_id)
    return list(cities.values())
