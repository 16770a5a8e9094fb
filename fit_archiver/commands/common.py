"""Shared command helpers."""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.markup import escape

from fit_archiver.core.models import FileResult, PlacementStatus
from fit_archiver.core.state import CLIState

STATUS_STYLES = {
    PlacementStatus.COPIED: "green",
    PlacementStatus.MOVED: "green",
    PlacementStatus.WOULD_COPY: "cyan",
    PlacementStatus.WOULD_MOVE: "cyan",
    PlacementStatus.SKIPPED: "yellow",
    PlacementStatus.FAILED: "red",
}


def get_state(ctx: typer.Context) -> CLIState:
    """Extract validated CLI state from Typer context."""
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=2)
    return state


def print_json_payload(state: CLIState, payload: Any) -> None:
    """Print JSON payload with plain-mode fallback for piping."""
    if state.plain_output:
        typer.echo(json.dumps(payload, separators=(",", ":")))
        return
    state.console.print_json(data=payload)


def describe_result(result: FileResult) -> str:
    """Human readable status line, e.g. ``'a.fit' -> 'b.fit' ... copied``."""
    outcome = result.outcome
    line = f"'{result.source}'"
    if outcome.destination is not None:
        line += f" -> '{outcome.destination}'"
    line += f" ... {outcome.status.value}"
    if outcome.reason:
        line += f" ({outcome.reason})"
    if outcome.is_failure and outcome.detail:
        line += f": {outcome.detail}"
    return line


def print_result(state: CLIState, result: FileResult) -> None:
    """Emit one per-file status line in plain or pretty mode."""
    outcome = result.outcome
    if state.plain_output:
        typer.echo(
            "\t".join(
                [
                    outcome.status.value,
                    str(result.source),
                    str(outcome.destination or "-"),
                    outcome.reason or "-",
                ]
            )
        )
        return
    style = STATUS_STYLES.get(outcome.status, "white")
    state.console.print(f"[{style}]{escape(describe_result(result))}[/{style}]", soft_wrap=True)
