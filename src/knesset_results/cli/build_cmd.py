"""Build command: run the pipeline and write all artifacts."""

from pathlib import Path

import typer


def build(
    round_ids: list[int] | None = typer.Option(None, "--round", "-r", help="Round to build (repeatable, default all)"),
    output_dir: Path | None = typer.Option(None, "--output-dir", help="Artifact root directory"),
    legacy_file: Path | None = typer.Option(None, "--legacy-file", help="Spreadsheet for the legacy round"),
    registry_coordinates: bool = typer.Option(
        False, "--registry-coordinates", help="Fill coordinates the verified table lacks from the CBS registry"
    ),
) -> None:
    """Fetch every round, reconcile cities, and write the JSON artifacts."""
    from knesset_results.core.config import get_settings
    from knesset_results.lib.reference import ReferenceDataError, load_reference_data
    from knesset_results.services.pipeline_service import run_pipeline

    settings = get_settings()
    updates: dict = {}
    if output_dir is not None:
        updates["output_dir"] = output_dir
    if legacy_file is not None:
        updates["legacy_spreadsheet_path"] = legacy_file
    if updates:
        settings = settings.model_copy(update=updates)

    try:
        reference = load_reference_data(settings.reference_dir)
    except ReferenceDataError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    try:
        result = run_pipeline(
            settings,
            reference,
            round_ids or None,
            fetch_coordinates=registry_coordinates,
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    except OSError as e:
        typer.echo(f"Error writing artifacts: {e}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo("\nBuild summary:")
    for round_result in result.rounds:
        if round_result.succeeded:
            typer.echo(
                f"  Round {round_result.round_id}: {round_result.strategy} "
                f"({round_result.city_count} cities, {round_result.ballot_box_count} ballot boxes)"
            )
        else:
            typer.echo(f"  Round {round_result.round_id}: FAILED - {round_result.error}")

    for round_id, backfill in result.backfill.items():
        typer.echo(f"  Round {round_id} city codes: {backfill.matched} matched, {backfill.unmatched} unmatched")

    if result.meta_path is not None:
        typer.echo(f"  Cities:      {result.city_count}")
        typer.echo(f"  Meta:        {result.meta_path}")

    if not result.ok:
        raise typer.Exit(code=1)
