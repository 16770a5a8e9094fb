"""Copy/move files into the archive without overwriting existing data."""

from __future__ import annotations

import filecmp
import logging
import os
import shutil
from pathlib import Path
from typing import Iterator

from fit_archiver.core.constants import DEFAULT_MAX_COLLISIONS
from fit_archiver.core.errors import CollisionExhaustedError
from fit_archiver.core.models import PlacementMode, PlacementOutcome, PlacementStatus

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


def suffixed_candidates(destination: Path, max_collisions: int) -> Iterator[Path]:
    """Yield ``name.ext``, ``name-1.ext``, ... ``name-N.ext``."""
    yield destination
    stem, suffix = destination.stem, destination.suffix
    for index in range(1, max_collisions + 1):
        yield destination.with_name(f"{stem}-{index}{suffix}")


def same_content(source: Path, candidate: Path) -> bool:
    """Return True when ``candidate`` is a regular file identical to ``source``."""
    if not candidate.is_file():
        return False
    return filecmp.cmp(source, candidate, shallow=False)


def is_same_file(source: Path, candidate: Path) -> bool:
    """Return True when ``candidate`` resolves to the very file ``source`` is."""
    if not candidate.exists():
        return False
    return os.path.samefile(source, candidate)


def _exclusive_copy(source: Path, target: Path) -> None:
    """Copy ``source`` to a new file ``target``; FileExistsError if taken."""
    with source.open("rb") as src:
        # an unreadable source must not leave an empty target behind
        with target.open("xb") as dst:
            try:
                shutil.copyfileobj(src, dst, _CHUNK_SIZE)
                dst.flush()
                os.fsync(dst.fileno())
            except BaseException:
                dst.close()
                target.unlink()
                raise
    shutil.copystat(source, target)


def _success(mode: PlacementMode, dry_run: bool, destination: Path) -> PlacementOutcome:
    if dry_run:
        status = PlacementStatus.WOULD_MOVE if mode is PlacementMode.MOVE else PlacementStatus.WOULD_COPY
    else:
        status = PlacementStatus.MOVED if mode is PlacementMode.MOVE else PlacementStatus.COPIED
    return PlacementOutcome(status, destination=destination)


def _place(
    source: Path,
    destination: Path,
    mode: PlacementMode,
    dry_run: bool,
    max_collisions: int,
) -> PlacementOutcome:
    if not source.is_file():
        raise FileNotFoundError(f"Source file '{source}' does not exist")

    if not dry_run:
        destination.parent.mkdir(parents=True, exist_ok=True)

    for candidate in suffixed_candidates(destination, max_collisions):
        if os.path.lexists(candidate):
            if is_same_file(source, candidate):
                logger.info("'%s' is already in place", source)
                return PlacementOutcome.skipped("already-archived", destination=candidate)
            if same_content(source, candidate):
                if mode is PlacementMode.MOVE and not dry_run:
                    source.unlink()
                logger.info("'%s' already archived as '%s'", source, candidate)
                return PlacementOutcome.skipped("duplicate", destination=candidate)
            logger.debug("'%s' is taken, trying next suffix", candidate)
            continue

        if dry_run:
            return _success(mode, dry_run, candidate)

        try:
            _exclusive_copy(source, candidate)
        except FileExistsError:
            # Created by someone else since the existence check.
            logger.debug("'%s' appeared while copying, trying next suffix", candidate)
            continue

        if mode is PlacementMode.MOVE:
            source.unlink()
        return _success(mode, dry_run, candidate)

    raise CollisionExhaustedError(
        f"No free name for '{destination}' after {max_collisions} suffixes"
    )


def place(
    source: Path,
    destination: Path,
    mode: PlacementMode = PlacementMode.COPY,
    *,
    dry_run: bool = False,
    max_collisions: int = DEFAULT_MAX_COLLISIONS,
) -> PlacementOutcome:
    """Place ``source`` at ``destination`` and report what happened.

    Existing files are never overwritten: identical content is skipped,
    different content gets a numeric suffix before the extension. Errors are
    reported as failed outcomes instead of being raised.
    """
    try:
        return _place(source, destination, mode, dry_run, max_collisions)
    except CollisionExhaustedError as exc:
        return PlacementOutcome.failed("collision-exhausted", detail=str(exc), destination=destination)
    except OSError as exc:
        return PlacementOutcome.failed("io-error", detail=str(exc), destination=destination)
