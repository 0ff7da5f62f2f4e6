"""Typer CLI root application."""

import typer

from knesset_results.core.config import get_settings
from knesset_results.core.logging import setup_logging

app = typer.Typer(name="knesset-results", help="Knesset election results data pipeline")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


def _register_subcommands() -> None:
    """Register all CLI commands."""
    from knesset_results.cli.build_cmd import build
    from knesset_results.cli.reference_cmd import parties, party, rounds

    app.command("build")(build)
    app.command("party")(party)
    app.command("parties")(parties)
    app.command("rounds")(rounds)


_register_subcommands()
