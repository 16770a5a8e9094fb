"""Text helpers."""

from __future__ import annotations

import os
import re

from fit_archiver.core.constants import UNKNOWN

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f\u2028\u2029]")


def normalize_value(value: str) -> str:
    """Trim, lowercase and replace spaces with underscores."""
    return value.strip().lower().replace(" ", "_")


def sanitize_component(value: str) -> str:
    """Make a substituted value safe to use inside a single path segment."""
    if not value:
        return UNKNOWN
    separators = {"/", "\\", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    cleaned = "".join("_" if char in separators else char for char in value)
    cleaned = _CONTROL_CHARS.sub("_", cleaned)
    if set(cleaned) == {"."}:
        cleaned = "_" * len(cleaned)
    return cleaned
