"""Tests for the artifact documents."""

import json
from pathlib import Path

from knesset_results.lib.exporter import (
    build_meta_document,
    round_cities_document,
    write_meta,
    write_round,
)
from knesset_results.lib.identity import CityIdentity
from knesset_results.lib.ingest import BallotBoxRecord, CityRoundRecord
from knesset_results.lib.reference import ReferenceData


def _read(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


class TestRoundDocuments:
    """Tests for the per-round documents."""

    def test_round_cities_document(self, tmp_path: Path) -> None:
        city = CityRoundRecord(
            cityCode="70",
            cityName="אשדוד",
            eligibleVoters=800,
            totalVotes=650,
            invalidVotes=6,
            validVotes=644,
            parties={"מחל": 448, "אמת": 196},
        )
        cities_path, boxes_path = write_round(tmp_path, 25, [city], [])

        assert cities_path == tmp_path / "rounds" / "25.json"
        assert _read(boxes_path) == {"roundId": 25, "ballotBoxes": []}
        assert _read(cities_path) == {
            "roundId": 25,
            "cities": [
                {
                    "cityCode": "70",
                    "cityName": "אשדוד",
                    "eligibleVoters": 800,
                    "totalVotes": 650,
                    "invalidVotes": 6,
                    "validVotes": 644,
                    "parties": {"מחל": 448, "אמת": 196},
                }
            ],
        }

    def test_party_order_preserved(self) -> None:
        city = CityRoundRecord(cityCode="70", cityName="אשדוד", parties={"מחל": 1, "אמת": 2, "ב": 3})
        document = round_cities_document(25, [city])
        assert list(document["cities"][0]["parties"]) == ["מחל", "אמת", "ב"]

    def test_round_ballot_boxes_document(self, tmp_path: Path) -> None:
        box = BallotBoxRecord(id="25-70-1", cityCode="70", cityName="אשדוד", ballotNumber=1, totalVotes=10)
        _cities_path, boxes_path = write_round(tmp_path, 25, [], [box])

        assert boxes_path == tmp_path / "ballotboxes" / "25.json"
        document = _read(boxes_path)
        assert document["roundId"] == 25
        assert document["ballotBoxes"][0]["id"] == "25-70-1"
        assert document["ballotBoxes"][0]["ballotNumber"] == 1


class TestMetaDocument:
    """Tests for the consolidated document."""

    def test_meta_shape(self, reference: ReferenceData) -> None:
        cities = [
            CityIdentity(code="70", name="אשדוד", lat=31.8, lng=34.64),
            CityIdentity(code="5000", name="תל אביב-יפו", aliases=["תל אביב יפו"]),
        ]
        document = build_meta_document(reference.rounds, reference.parties, cities, reference.completeness)

        assert set(document) == {"rounds", "parties", "cities", "dataCompleteness"}
        assert document["rounds"][0] == {"id": 15, "name": "הכנסת ה-15", "date": "1999-05-17", "year": 1999}
        assert document["cities"] == [
            {"code": "70", "name": "אשדוד", "lat": 31.8, "lng": 34.64},
            {"code": "5000", "name": "תל אביב-יפו", "aliases": ["תל אביב יפו"]},
        ]
        assert "notes" not in document["dataCompleteness"]["25"]
        assert document["dataCompleteness"]["17"]["hasCityCodes"] is False

    def test_party_tables_have_string_round_keys(self, tmp_path: Path, reference: ReferenceData) -> None:
        path = write_meta(tmp_path, reference.rounds, reference.parties, [], reference.completeness)
        party = _read(path)["parties"]["ט"]
        assert party["seats"]["25"] == 14
        assert party["aliasRounds"]["18"]["nameHe"] == "האיחוד הלאומי"

    def test_parties_without_alias_rounds_omit_key(self, reference: ReferenceData) -> None:
        document = build_meta_document([], reference.parties, [], {})
        without_alias = [p for letter, p in document["parties"].items() if reference.parties[letter].aliasRounds is None]
        assert without_alias
        assert all("aliasRounds" not in p for p in without_alias)
