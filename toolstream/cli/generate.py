"""``toolstream generate-tools`` — generate simplestreams tools metadata.

Finds the tools in the environment's storage (or in a local directory),
optionally fetches each tarball to record its size and SHA-256, and writes
the index and products documents under ``tools/streams/v1``.
"""

from __future__ import annotations

from typing import Optional

import requests
import typer
from rich.console import Console
from rich.panel import Panel

from toolstream.config import GeneratorSettings
from toolstream.core.errors import ToolsMetadataError
from toolstream.core.orchestrator import Orchestrator
from toolstream.environs import HttpEnviron
from toolstream.models.tools import ToolsFilter, VersionNumber

console = Console()


def generate_tools_cmd(
    fetch: Optional[bool] = typer.Option(
        None,
        "--fetch/--no-fetch",
        help="Fetch tools and compute content size and hash [default: fetch].",
    ),
    directory: str = typer.Option(
        "",
        "--directory",
        "-d",
        help="Local directory to locate tools and store metadata.",
    ),
    major_version: Optional[int] = typer.Option(
        None,
        "--major-version",
        help="Major tools version to index (defaults to TOOLSTREAM_MAJOR_VERSION).",
    ),
    number: Optional[str] = typer.Option(
        None, "--version", help="Only index tools with this exact version number."
    ),
    series: Optional[str] = typer.Option(
        None, "--series", help="Only index tools for this series."
    ),
    arch: Optional[str] = typer.Option(
        None, "--arch", help="Only index tools for this architecture."
    ),
) -> None:
    """Generate simplestreams tools metadata."""
    settings = GeneratorSettings()
    try:
        tools_filter = ToolsFilter(
            number=VersionNumber.parse(number) if number else None,
            series=series,
            arch=arch,
        )
    except ValueError as exc:
        console.print(f"[bold red]Invalid --version:[/bold red] {exc}")
        raise typer.Exit(code=2)

    config = settings.to_generate_config(
        fetch=fetch,
        output_directory=directory or None,
        major_version=major_version,
        tools_filter=tools_filter,
    )

    session = requests.Session()
    environ = HttpEnviron.from_settings(settings, session)
    orchestrator = Orchestrator(
        environ,
        config,
        session=session,
        timeout=settings.http_timeout,
        console=console,
    )

    try:
        result = orchestrator.run()
    except ToolsMetadataError as exc:
        console.print(f"[bold red]generate-tools failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print()
    console.print(
        Panel(
            "\n".join([
                "[bold green]Tools metadata generated.[/bold green]",
                "",
                f"[bold]Run ID:[/bold]  {result.run_id}",
                f"[bold]Tools:[/bold]   {len(result.records)}",
                f"[bold]Fetched:[/bold] {'yes' if config.fetch else 'no'}",
                *[f"[bold]Wrote:[/bold]   {address}" for address in result.written],
            ]),
            title="[bold]toolstream[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
