"""Archive command: copy or move FIT files into the templated layout."""

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import List, Optional

import typer

from fit_archiver.commands.common import get_state, print_json_payload, print_result
from fit_archiver.core.archiver import Archiver
from fit_archiver.core.config import ConfigError, resolve_archive_options
from fit_archiver.core.errors import InvalidTemplateError
from fit_archiver.core.extract import FitMetadataExtractor

TEMPLATE_HELP = (
    "Template for the path and name of the archive file inside the archive directory. "
    "'/' separates path components. All strftime() tags expand the activity start time; "
    "$s (sport type), $S (sport subtype), $n (sport name) and $w (workout name) expand "
    "activity data and default to 'unknown'. Quote the template so the shell leaves the tags alone."
)


def archive_command(
    ctx: typer.Context,
    files: List[Path] = typer.Argument(..., help="FIT files to archive"),
    directory: Optional[Path] = typer.Option(
        None, "--directory", "-d", help="Archive base directory [default: .]"
    ),
    file_template: Optional[str] = typer.Option(
        None,
        "--file-template",
        "-f",
        help=TEMPLATE_HELP,
    ),
    move: Optional[bool] = typer.Option(
        None,
        "--move/--copy",
        "-m/-c",
        help="Move files to the archive instead of copying them [default: copy, or archive.move from config]",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Do not copy or move the files, just show what would happen"
    ),
    max_collisions: Optional[int] = typer.Option(
        None, "--max-collisions", min=0, help="Numeric suffixes to try when the destination is taken"
    ),
) -> None:
    """Copy or move FIT files into the archive.

    \b
    Tag   Description     Example          Default
    $s    sport type      'running'        'unknown'
    $S    sport subtype   'trail'          'unknown'
    $n    sport name      'trail_run'      'unknown'
    $w    workout name    'temporun_8km'   'unknown'
    """
    state = get_state(ctx)

    try:
        options = resolve_archive_options(
            state.config,
            directory=directory,
            file_template=file_template,
            move=move,
            dry_run=dry_run,
            max_collisions=max_collisions,
        )
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)

    try:
        archiver = Archiver(options, FitMetadataExtractor())
    except InvalidTemplateError as exc:
        typer.echo(f"Invalid file template: {exc}")
        raise typer.Exit(code=2)

    output = state.output_mode
    on_result = None if output == "json" else partial(print_result, state)
    report = archiver.run(files, on_result=on_result)

    if output == "json":
        print_json_payload(
            state,
            {
                "results": [result.to_dict() for result in report.results],
                "summary": report.summary(),
                "dry_run": options.dry_run,
                "mode": options.mode.value,
            },
        )
    else:
        message = f"Processed {len(report.results)} files"
        if report.has_failures:
            message += f" with {report.failed} errors."
        if output == "plain":
            typer.echo(message)
        else:
            state.console.print(message)

    if report.has_failures:
        raise typer.Exit(code=report.exit_code)
