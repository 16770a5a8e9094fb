"""Batch orchestration: extract, render and place each input file."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from fit_archiver.core.constants import DEFAULT_DIRECTORY, DEFAULT_FILE_TEMPLATE, DEFAULT_MAX_COLLISIONS
from fit_archiver.core.errors import DecodeError, RenderError
from fit_archiver.core.extract import MetadataExtractor
from fit_archiver.core.models import (
    ArchiveReport,
    FileResult,
    FileState,
    PlacementMode,
    PlacementOutcome,
)
from fit_archiver.core.placement import place
from fit_archiver.core.render import render
from fit_archiver.core.template import compile_template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveOptions:
    """Resolved, immutable settings for one archiver run."""

    directory: Path = Path(DEFAULT_DIRECTORY)
    file_template: str = DEFAULT_FILE_TEMPLATE
    move: bool = False
    dry_run: bool = False
    max_collisions: int = DEFAULT_MAX_COLLISIONS

    @property
    def mode(self) -> PlacementMode:
        return PlacementMode.MOVE if self.move else PlacementMode.COPY


class Archiver:
    """Archive FIT files according to a file template.

    The template is compiled once on construction, so an invalid template
    raises ``InvalidTemplateError`` before any file is touched. Per-file
    failures never stop the batch.
    """

    def __init__(self, options: ArchiveOptions, extractor: MetadataExtractor) -> None:
        self.options = options
        self.extractor = extractor
        self.template = compile_template(options.file_template)

    def _transition(self, source: Path, state: FileState) -> None:
        logger.debug("%s: %s", source, state.value)

    def archive_file(self, source: Path) -> FileResult:
        """Run one file through extraction, rendering and placement."""
        self._transition(source, FileState.EXTRACTING)
        try:
            meta = self.extractor.extract(source)
        except DecodeError as exc:
            logger.error("%s", exc)
            return FileResult(source, FileState.FAILED, PlacementOutcome.failed("unreadable", detail=str(exc)))

        self._transition(source, FileState.RENDERING)
        try:
            rendered = render(self.template, meta, self.options.directory, suffix=source.suffix)
        except RenderError as exc:
            logger.error("Unable to render destination for '%s': %s", source, exc)
            return FileResult(source, FileState.FAILED, PlacementOutcome.failed("render-error", detail=str(exc)))

        self._transition(source, FileState.PLACING)
        outcome = place(
            source,
            rendered.destination,
            self.options.mode,
            dry_run=self.options.dry_run,
            max_collisions=self.options.max_collisions,
        )
        if outcome.is_failure:
            logger.error("Unable to archive '%s': %s", source, outcome.detail or outcome.reason)
            state = FileState.FAILED
        else:
            state = FileState.DONE
        self._transition(source, state)
        return FileResult(source, state, outcome)

    def run(
        self,
        files: Iterable[Path],
        on_result: Optional[Callable[[FileResult], None]] = None,
    ) -> ArchiveReport:
        """Archive every file and collect per-file results."""
        report = ArchiveReport()
        for source in files:
            self._transition(source, FileState.PENDING)
            result = self.archive_file(source)
            report.results.append(result)
            if on_result is not None:
                on_result(result)
        logger.info(
            "Processed %d files: %d placed, %d skipped, %d failed",
            len(report.results),
            report.placed,
            report.skipped,
            report.failed,
        )
        return report
