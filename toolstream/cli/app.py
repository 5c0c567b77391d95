"""Main Typer application — registers the CLI commands.

Entry point: ``toolstream`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from toolstream.cli.generate import generate_tools_cmd
from toolstream.config import GeneratorSettings

app = typer.Typer(
    name="toolstream",
    help="toolstream: simplestreams metadata for tools tarballs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Configure logging before any command runs."""
    level = "DEBUG" if verbose else GeneratorSettings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


app.command(name="generate-tools", help="Generate simplestreams tools metadata.")(
    generate_tools_cmd
)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
