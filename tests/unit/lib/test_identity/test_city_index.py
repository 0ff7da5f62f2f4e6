"""Unit tests for the cross-round city identity index."""

from knesset_results.lib.identity import CityIndex
from knesset_results.lib.ingest import CityRoundRecord
from knesset_results.lib.reference import Coordinates


def _city(code: str, name: str) -> CityRoundRecord:
    return CityRoundRecord(cityCode=code, cityName=name)


class TestObserve:
    """Tests for CityIndex.observe()."""

    def test_first_seen_name_is_canonical(self) -> None:
        index = CityIndex()
        assert index.observe([_city("70", "אשדוד"), _city("5000", "תל אביב - יפו")]) == 2
        entry = index.get("70")
        assert entry is not None
        assert entry.name == "אשדוד"
        assert entry.aliases == set()

    def test_different_spelling_becomes_alias(self) -> None:
        index = CityIndex()
        index.observe([_city("5000", "תל אביב - יפו")])
        added = index.observe([_city("5000", "תל אביב יפו")])
        assert added == 0
        assert len(index) == 1
        entry = index.get("5000")
        assert entry is not None
        assert entry.name == "תל אביב - יפו"
        assert entry.aliases == {"תל אביב יפו"}

    def test_repeated_spelling_not_duplicated(self) -> None:
        index = CityIndex()
        index.observe([_city("5000", "תל אביב - יפו")])
        index.observe([_city("5000", "תל אביב יפו")])
        index.observe([_city("5000", "תל אביב יפו"), _city("5000", "תל אביב - יפו")])
        entry = index.get("5000")
        assert entry is not None
        assert entry.aliases == {"תל אביב יפו"}

    def test_codeless_and_sentinel_ignored(self) -> None:
        index = CityIndex()
        index.observe([_city("", "אשדוד"), _city("0", "מעטפות כפולות")])
        assert len(index) == 0
        assert "0" not in index


class TestBackfillCodes:
    """Tests for CityIndex.backfill_codes()."""

    def test_matches_by_normalized_name(self) -> None:
        index = CityIndex()
        index.observe([_city("70", "אשדוד")])
        records = [_city("", "אשדוד"), _city("", "עיר לא קיימת")]

        result = index.backfill_codes(records)

        assert records[0].cityCode == "70"
        assert records[1].cityCode == ""
        assert result.matched == 1
        assert result.unmatched == 1
        assert result.unmatched_names == ["עיר לא קיימת"]

    def test_matches_aliases(self) -> None:
        index = CityIndex()
        index.observe([_city("5000", "תל אביב-יפו")])
        index.observe([_city("5000", "תל אביב יפו")])
        records = [_city("", "תל אביב יפו")]
        index.backfill_codes(records)
        assert records[0].cityCode == "5000"

    def test_no_fuzzy_matching(self) -> None:
        index = CityIndex()
        index.observe([_city("70", "אשדוד")])
        records = [_city("", "אשדוד ים")]
        result = index.backfill_codes(records)
        assert records[0].cityCode == ""
        assert result.unmatched == 1

    def test_ambiguous_name_left_unmatched(self) -> None:
        index = CityIndex()
        index.observe([_city("1", "נווה"), _city("2", "נוה")])
        index.observe([_city("2", "נווה")])
        records = [_city("", "נווה"), _city("", "נוה")]
        result = index.backfill_codes(records)
        assert records[0].cityCode == ""
        assert records[1].cityCode == "2"
        assert result.matched == 1

    def test_records_with_codes_untouched(self) -> None:
        index = CityIndex()
        index.observe([_city("70", "אשדוד")])
        records = [_city("71", "אשדוד")]
        result = index.backfill_codes(records)
        assert records[0].cityCode == "71"
        assert result.matched == 0
        assert result.unmatched == 0


class TestApplyAuthoritativeNames:
    """Tests for CityIndex.apply_authoritative_names()."""

    def test_override_becomes_canonical(self) -> None:
        index = CityIndex()
        index.observe([_city("5000", "תל אביב - יפו")])
        index.observe([_city("5000", "תל אביב יפו")])

        corrected = index.apply_authoritative_names(
            [_city("5000", "תל אביב יפו")],
            {"תל אביב יפו": "תל אביב-יפו"},
        )

        assert corrected == 1
        entry = index.get("5000")
        assert entry is not None
        assert entry.name == "תל אביב-יפו"
        assert entry.aliases == {"תל אביב - יפו", "תל אביב יפו"}

    def test_authoritative_name_without_override(self) -> None:
        index = CityIndex()
        index.observe([_city("70", "אשדוד העיר")])
        index.apply_authoritative_names([_city("70", "אשדוד")], {})
        entry = index.get("70")
        assert entry is not None
        assert entry.name == "אשדוד"
        assert entry.aliases == {"אשדוד העיר"}

    def test_unseen_code_added(self) -> None:
        index = CityIndex()
        index.apply_authoritative_names([_city("9800", "בנימינהגבעת עדה")], {"בנימינהגבעת עדה": "בנימינה-גבעת עדה"})
        entry = index.get("9800")
        assert entry is not None
        assert entry.name == "בנימינה-גבעת עדה"
        assert entry.aliases == {"בנימינהגבעת עדה"}


class TestToCityList:
    """Tests for CityIndex.to_city_list()."""

    def test_sorted_with_optional_fields(self) -> None:
        index = CityIndex()
        index.observe([_city("5000", "תל אביב-יפו"), _city("70", "אשדוד")])
        index.observe([_city("5000", "תל אביב יפו")])

        cities = index.to_city_list({"70": Coordinates(lat=31.8, lng=34.64)})

        assert [c.code for c in cities] == ["70", "5000"]
        ashdod, tel_aviv = cities
        assert ashdod.lat == 31.8
        assert ashdod.aliases is None
        assert tel_aviv.aliases == ["תל אביב יפו"]
        assert tel_aviv.lat is None
        assert tel_aviv.model_dump(exclude_none=True) == {
            "code": "5000",
            "name": "תל אביב-יפו",
            "aliases": ["תל אביב יפו"],
        }
