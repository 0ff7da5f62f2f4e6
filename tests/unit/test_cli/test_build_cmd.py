"""Unit tests for the build CLI command."""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from knesset_results.cli.app import app
from knesset_results.lib.identity import BackfillResult
from knesset_results.services.pipeline_service import PipelineResult, RoundResult, RoundStrategy

runner = CliRunner()


def _result(*, failed: bool = False) -> PipelineResult:
    rounds = [
        RoundResult(round_id=17, strategy=RoundStrategy.AGGREGATE, succeeded=True, city_count=2, ballot_box_count=4),
        RoundResult(
            round_id=25,
            strategy=RoundStrategy.DIRECT,
            succeeded=not failed,
            city_count=3,
            ballot_box_count=3,
            error="HTTP 500 fetching resource x" if failed else None,
        ),
    ]
    return PipelineResult(
        rounds=rounds,
        backfill={17: BackfillResult(matched=1, unmatched=1, unmatched_names=["עיר לא קיימת"])},
        city_count=3,
        meta_path=Path("out/meta.json"),
    )


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OUTPUT_DIR", raising=False)
    monkeypatch.delenv("REFERENCE_DIR", raising=False)


class TestBuildCommand:
    """Tests for `knesset-results build`."""

    def test_build_success(self, tmp_path: Path) -> None:
        with patch("knesset_results.services.pipeline_service.run_pipeline", return_value=_result()) as mock_run:
            result = runner.invoke(
                app,
                [
                    "build",
                    "--round",
                    "17",
                    "--round",
                    "25",
                    "--output-dir",
                    str(tmp_path / "out"),
                    "--registry-coordinates",
                ],
            )

        assert result.exit_code == 0, result.output
        assert "Round 17: aggregate (2 cities, 4 ballot boxes)" in result.output
        assert "Round 17 city codes: 1 matched, 1 unmatched" in result.output

        settings, _reference, round_ids = mock_run.call_args.args
        assert settings.output_dir == tmp_path / "out"
        assert round_ids == [17, 25]
        assert mock_run.call_args.kwargs == {"fetch_coordinates": True}

    def test_build_all_rounds_by_default(self) -> None:
        with patch("knesset_results.services.pipeline_service.run_pipeline", return_value=_result()) as mock_run:
            result = runner.invoke(app, ["build"])

        assert result.exit_code == 0, result.output
        assert mock_run.call_args.args[2] is None
        assert mock_run.call_args.kwargs == {"fetch_coordinates": False}

    def test_legacy_file_override(self, tmp_path: Path) -> None:
        legacy = tmp_path / "k15.xls"
        with patch("knesset_results.services.pipeline_service.run_pipeline", return_value=_result()) as mock_run:
            runner.invoke(app, ["build", "--legacy-file", str(legacy)])

        assert mock_run.call_args.args[0].legacy_spreadsheet_path == legacy

    def test_failed_round_exits_nonzero(self) -> None:
        with patch("knesset_results.services.pipeline_service.run_pipeline", return_value=_result(failed=True)):
            result = runner.invoke(app, ["build"])

        assert result.exit_code == 1
        assert "Round 25: FAILED - HTTP 500" in result.output

    def test_unknown_round_exits_nonzero(self) -> None:
        result = runner.invoke(app, ["build", "--round", "99"])
        assert result.exit_code == 1
        assert "Unknown rounds" in result.output

    def test_invalid_reference_dir_exits_nonzero(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "rounds.json").write_text("[{}]", encoding="utf-8")
        monkeypatch.setenv("REFERENCE_DIR", str(tmp_path))
        result = runner.invoke(app, ["build"])
        assert result.exit_code == 1
        assert "Reference data failed validation" in result.output
