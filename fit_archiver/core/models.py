"""Lightweight data models shared by the archiving pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from fit_archiver.core.constants import PATH_SEPARATOR, UNKNOWN


@dataclass(frozen=True)
class Metadata:
    """Activity metadata extracted from a single file."""

    timestamp: Optional[datetime]
    sport: str = UNKNOWN
    sub_sport: str = UNKNOWN
    sport_name: str = UNKNOWN
    workout_name: str = UNKNOWN


@dataclass(frozen=True)
class RenderedPath:
    """Destination path relative to the archive base directory."""

    base: Path
    relative: str

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self.relative.split(PATH_SEPARATOR))

    @property
    def destination(self) -> Path:
        return self.base.joinpath(*self.segments)


class PlacementMode(str, Enum):
    COPY = "copy"
    MOVE = "move"


class PlacementStatus(str, Enum):
    COPIED = "copied"
    MOVED = "moved"
    WOULD_COPY = "would-copy"
    WOULD_MOVE = "would-move"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class PlacementOutcome:
    """Result of placing one file in the archive."""

    status: PlacementStatus
    destination: Optional[Path] = None
    reason: Optional[str] = None
    detail: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        return self.status is PlacementStatus.FAILED

    @classmethod
    def failed(cls, reason: str, detail: Optional[str] = None, destination: Optional[Path] = None) -> PlacementOutcome:
        return cls(PlacementStatus.FAILED, destination=destination, reason=reason, detail=detail)

    @classmethod
    def skipped(cls, reason: str, destination: Optional[Path] = None, detail: Optional[str] = None) -> PlacementOutcome:
        return cls(PlacementStatus.SKIPPED, destination=destination, reason=reason, detail=detail)


class FileState(str, Enum):
    PENDING = "pending"
    EXTRACTING = "extracting"
    RENDERING = "rendering"
    PLACING = "placing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class FileResult:
    """Final state and outcome of one input file."""

    source: Path
    state: FileState
    outcome: PlacementOutcome

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": str(self.source),
            "status": self.outcome.status.value,
            "destination": str(self.outcome.destination) if self.outcome.destination else None,
            "reason": self.outcome.reason,
            "detail": self.outcome.detail,
        }


@dataclass
class ArchiveReport:
    """Per-file results of one archiver run."""

    results: List[FileResult] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.results if item.outcome.is_failure)

    @property
    def skipped(self) -> int:
        return sum(1 for item in self.results if item.outcome.status is PlacementStatus.SKIPPED)

    @property
    def placed(self) -> int:
        return len(self.results) - self.failed - self.skipped

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    @property
    def exit_code(self) -> int:
        return 1 if self.has_failures else 0

    def summary(self) -> Dict[str, int]:
        return {
            "total": len(self.results),
            "placed": self.placed,
            "skipped": self.skipped,
            "failed": self.failed,
        }
