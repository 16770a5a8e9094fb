"""Runtime state shared by fit-archiver commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from rich.console import Console


@dataclass
class CLIState:
    """Global CLI flags, loaded configuration and output console."""

    json_output: bool
    plain_output: bool
    verbose: bool
    quiet: bool
    config_path: Path
    config: Dict[str, Any]
    console: Console
    log_level: str = "warning"

    @property
    def output_mode(self) -> str:
        if self.json_output:
            return "json"
        if self.plain_output:
            return "plain"
        return "pretty"
