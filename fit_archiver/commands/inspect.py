"""Inspect command: show the metadata used for template expansion."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import typer
from rich.markup import escape
from rich.table import Table

from fit_archiver.commands.common import get_state, print_json_payload
from fit_archiver.core.errors import DecodeError
from fit_archiver.core.extract import FitMetadataExtractor

FIELDS = ("timestamp", "sport", "sub_sport", "sport_name", "workout_name")


def inspect_command(
    ctx: typer.Context,
    files: List[Path] = typer.Argument(..., help="FIT files to inspect"),
) -> None:
    """Show timestamp, sport and workout data extracted from FIT files."""
    state = get_state(ctx)
    extractor = FitMetadataExtractor()

    rows: List[Dict[str, Any]] = []
    for path in files:
        try:
            meta = extractor.extract(path)
        except DecodeError as exc:
            rows.append({"source": str(path), "error": str(exc)})
            continue
        rows.append(
            {
                "source": str(path),
                "timestamp": meta.timestamp.isoformat() if meta.timestamp else None,
                "sport": meta.sport,
                "sub_sport": meta.sub_sport,
                "sport_name": meta.sport_name,
                "workout_name": meta.workout_name,
            }
        )

    errors = sum(1 for row in rows if "error" in row)

    output = state.output_mode
    if output == "json":
        print_json_payload(state, {"files": rows})
    elif output == "plain":
        typer.echo("\t".join(("source",) + FIELDS))
        for row in rows:
            if "error" in row:
                typer.echo(f"{row['source']}\terror\t{row['error']}")
                continue
            typer.echo("\t".join([row["source"]] + [str(row[key] or "-") for key in FIELDS]))
    else:
        table = Table(title=f"Activities ({len(rows)} files)")
        table.add_column("File")
        for key in FIELDS:
            table.add_column(key.replace("_", " ").capitalize())
        for row in rows:
            if "error" in row:
                table.add_row(escape(row["source"]), f"[red]{escape(row['error'])}[/red]", *([""] * (len(FIELDS) - 1)))
                continue
            table.add_row(escape(row["source"]), *[str(row[key] or "-") for key in FIELDS])
        state.console.print(table)

    if errors:
        raise typer.Exit(code=1)
