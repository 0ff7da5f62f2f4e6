"""Reference data commands: party name lookup and round listing."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

if TYPE_CHECKING:
    from knesset_results.lib.reference import ReferenceData


def _load_reference() -> ReferenceData:
    from knesset_results.core.config import get_settings
    from knesset_results.lib.reference import ReferenceDataError, load_reference_data

    try:
        return load_reference_data(get_settings().reference_dir)
    except ReferenceDataError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


def party(
    letter: str = typer.Argument(..., help="Ballot letter"),
    round_id: int | None = typer.Option(None, "--round", "-r", help="Round id for per-round names"),
    english: bool = typer.Option(False, "--english", help="Print the English name"),
) -> None:
    """Print the display name a ballot letter carried in a round."""
    from knesset_results.lib.reference import resolve_party_name

    reference = _load_reference()
    if letter not in reference.parties:
        typer.echo(f"Unknown ballot letter: {letter}", err=True)
        raise typer.Exit(code=1)
    if round_id is not None and reference.get_round(round_id) is None:
        typer.echo(f"Unknown round: {round_id}", err=True)
        raise typer.Exit(code=1)

    typer.echo(resolve_party_name(reference.parties, letter, round_id, english=english))


def rounds() -> None:
    """List rounds with their processing strategy and data completeness."""
    from knesset_results.lib.reference import RoundSources
    from knesset_results.services.pipeline_service import select_strategy

    reference = _load_reference()
    for round_meta in reference.rounds:
        completeness = reference.completeness[round_meta.id]
        strategy = select_strategy(completeness, reference.sources.get(round_meta.id, RoundSources()))
        missing = [
            label
            for label, present in (
                ("eligible voters", completeness.hasEligibleVoters),
                ("city codes", completeness.hasCityCodes),
                ("invalid votes", completeness.hasInvalidVotes),
            )
            if not present
        ]
        line = f"{round_meta.id:>3}  {round_meta.date}  {strategy:<18}  {completeness.dataSource}"
        if missing:
            line += f"  (missing: {', '.join(missing)})"
        typer.echo(line)


def parties(
    round_id: int = typer.Option(..., "--round", "-r", help="Round id"),
    english: bool = typer.Option(False, "--english", help="Print English names"),
) -> None:
    """List the parties that ran in a round, by seats won."""
    from knesset_results.lib.reference import parties_in_round, resolve_party_name

    reference = _load_reference()
    if reference.get_round(round_id) is None:
        typer.echo(f"Unknown round: {round_id}", err=True)
        raise typer.Exit(code=1)

    for info in parties_in_round(reference.parties, round_id):
        name = resolve_party_name(reference.parties, info.letter, round_id, english=english)
        typer.echo(f"{info.letter:<6}{info.seats[round_id]:>4}  {name}")
