"""Static constants and defaults for fit-archiver."""

from __future__ import annotations

DEFAULT_FILE_TEMPLATE = "%Y/%m/%Y-%m-%d-%H%M%S-$s"
DEFAULT_DIRECTORY = "."
DEFAULT_MAX_COLLISIONS = 100

UNKNOWN = "unknown"
MULTISPORT_PREFIX = "multisport_"

PATH_SEPARATOR = "/"
TIME_MARKER = "%"
TAG_MARKER = "$"
