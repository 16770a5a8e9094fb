"""Metadata extraction from FIT activity files."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import fitparse

from fit_archiver.core.constants import MULTISPORT_PREFIX, UNKNOWN
from fit_archiver.core.errors import DecodeError
from fit_archiver.core.models import Metadata
from fit_archiver.utils.text import normalize_value

logger = logging.getLogger(__name__)

# (message name, field name) -> Metadata attribute
_STRING_FIELDS = {
    ("sport", "name"): "sport_name",
    ("sport", "sub_sport"): "sub_sport",
    ("workout", "wkt_name"): "workout_name",
}


class MetadataExtractor(Protocol):
    """Anything that turns an input file into Metadata or raises DecodeError."""

    def extract(self, path: Path) -> Metadata:
        ...


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _string_value(path: Path, message: str, field: str, value: Any) -> Optional[str]:
    if isinstance(value, str):
        return normalize_value(value)
    logger.warning(
        "Unexpected value '%s' for '%s.%s' in '%s'. Using '%s' instead!",
        value,
        message,
        field,
        path,
        UNKNOWN,
    )
    return None


def combine_sports(sports: List[str]) -> str:
    """Build the sport value for single- and multisport activities."""
    if not sports:
        return UNKNOWN
    if len(sports) == 1:
        return sports[0]
    return MULTISPORT_PREFIX + "_".join(sports)


class FitMetadataExtractor:
    """Read activity metadata with fitparse."""

    def extract(self, path: Path) -> Metadata:
        values: Dict[str, str] = {}
        sports: List[str] = []
        timestamp: Optional[datetime] = None

        try:
            fit_file = fitparse.FitFile(str(path))
            for message in fit_file.get_messages():
                if message.name not in ("file_id", "sport", "workout"):
                    continue
                for field in message:
                    if field.value is None:
                        continue
                    key = (message.name, field.name)
                    if key == ("file_id", "time_created"):
                        if not isinstance(field.value, datetime):
                            raise DecodeError(
                                f"Unexpected value '{field.value}' for 'file_id.time_created' in '{path}'"
                            )
                        timestamp = _as_utc(field.value)
                    elif key == ("sport", "sport"):
                        sport = _string_value(path, message.name, field.name, field.value)
                        if sport:
                            sports.append(sport)
                    elif key in _STRING_FIELDS:
                        text = _string_value(path, message.name, field.name, field.value)
                        if text:
                            values[_STRING_FIELDS[key]] = text
        except fitparse.FitParseError as exc:
            raise DecodeError(f"Unable to parse '{path}': {exc}") from exc
        except OSError as exc:
            raise DecodeError(f"Unable to open '{path}': {exc}") from exc

        logger.debug("Extracted metadata from '%s': sports=%s %s", path, sports, values)
        return Metadata(timestamp=timestamp, sport=combine_sports(sports), **values)
